"""Validators."""

import re
from typing import List

WORK_TYPES = ("Remote", "Onsite", "Hybrid", "No preference")
EMPLOYMENT_TYPES = ("Full-time", "Part-time", "Contract", "Internship", "No preference")

NAME_MAX_LENGTH = 50
PASSWORD_MAX_BYTES = 72
TEXT_MAX_LENGTH = 100


def validate_email(email: str) -> bool:
    """Validate email format."""
    pattern = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
    return bool(re.match(pattern, email))


def validate_password_strength(password: str) -> tuple[bool, List[str]]:
    """Validate password strength."""
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    # bcrypt only accepts the first 72 bytes
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors.append(f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")

    if not re.search(r'[A-Z]', password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        errors.append("Password must contain at least one digit")

    return len(errors) == 0, errors


def validate_name(value: str, label: str) -> List[str]:
    """Check a required, trimmed name field."""
    if not value or not value.strip():
        return [f"{label} is required"]
    if len(value.strip()) > NAME_MAX_LENGTH:
        return [f"{label} cannot exceed {NAME_MAX_LENGTH} characters"]
    return []


def validate_choice(value: str, allowed: tuple, label: str) -> List[str]:
    if value not in allowed:
        return [f"{label} must be one of: {', '.join(allowed)}"]
    return []
