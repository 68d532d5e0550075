"""User model."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, String
from sqlalchemy.orm import validates

from app.core.exceptions import ValidationError
from app.db.base import Base
from app.utils.helpers import utcnow
from app.utils.validators import (
    EMPLOYMENT_TYPES,
    TEXT_MAX_LENGTH,
    WORK_TYPES,
    validate_choice,
    validate_email,
    validate_name,
)


class User(Base):
    """Job tracker account with profile and token state."""

    __tablename__ = "users"

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Profile
    current_title = Column(String(100), nullable=True)
    target_salary = Column(Float, nullable=True)
    location = Column(String(100), nullable=True)
    industry = Column(String(100), nullable=True)
    skills = Column(JSON, nullable=True)
    job_preferences = Column(JSON, nullable=False, default=lambda: {"workType": "No preference"})
    employment_type = Column(String(20), nullable=False, default="Full-time")

    # Email verification (token stored as SHA-256 digest)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String(64), index=True, nullable=True)
    email_verification_expire = Column(DateTime, nullable=True)

    # Password reset (token stored as SHA-256 digest)
    reset_password_token = Column(String(64), index=True, nullable=True)
    reset_password_expire = Column(DateTime, nullable=True)

    # Account status
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, default=utcnow, nullable=True)

    @validates("first_name", "last_name")
    def validate_names(self, key, value):
        label = "First name" if key == "first_name" else "Last name"
        errors = validate_name(value or "", label)
        if errors:
            raise ValidationError(f"Validation failed: {errors[0]}")
        return value.strip()

    @validates("email")
    def validate_email_address(self, key, value):
        normalized = (value or "").strip().lower()
        if not validate_email(normalized):
            raise ValidationError("Validation failed: Please provide a valid email address")
        return normalized

    @validates("current_title", "location", "industry")
    def validate_text(self, key, value):
        if value is None:
            return value
        value = value.strip()
        if len(value) > TEXT_MAX_LENGTH:
            label = key.replace("_", " ").capitalize()
            raise ValidationError(f"Validation failed: {label} cannot exceed {TEXT_MAX_LENGTH} characters")
        return value

    @validates("target_salary")
    def validate_target_salary(self, key, value):
        if value is not None and value < 0:
            raise ValidationError("Validation failed: Target salary cannot be negative")
        return value

    @validates("employment_type")
    def validate_employment_type(self, key, value):
        errors = validate_choice(value, EMPLOYMENT_TYPES, "Employment type")
        if errors:
            raise ValidationError(f"Validation failed: {errors[0]}")
        return value

    @validates("job_preferences")
    def validate_job_preferences(self, key, value):
        value = dict(value or {})
        value.setdefault("workType", "No preference")
        errors = validate_choice(value["workType"], WORK_TYPES, "Work type")
        if errors:
            raise ValidationError(f"Validation failed: {errors[0]}")
        return value

    def clear_reset_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expire = None

    def clear_verification_token(self) -> None:
        self.email_verification_token = None
        self.email_verification_expire = None

    def __repr__(self):
        return f"<User {self.email}>"
