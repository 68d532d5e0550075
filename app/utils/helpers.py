"""Helper utilities."""

import hashlib
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address for storage and lookup."""
    return email.strip().lower()


def generate_hash(text: str) -> str:
    """Generate SHA256 hash of text."""
    return hashlib.sha256(text.encode()).hexdigest()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def strip_strings(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with top-level string values trimmed."""
    return {key: value.strip() if isinstance(value, str) else value for key, value in data.items()}


def full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()
