"""Database models."""

from app.models.user import User

# Export all models
__all__ = [
    "User",
]
