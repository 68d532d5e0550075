"""Authentication schemas."""

from __future__ import annotations  # Enable forward references

from datetime import datetime
from typing import Annotated, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.user import User
from app.utils.helpers import full_name
from app.utils.validators import validate_password_strength

WorkType = Literal["Remote", "Onsite", "Hybrid", "No preference"]
EmploymentType = Literal["Full-time", "Part-time", "Contract", "Internship", "No preference"]

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
ShortText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_password(value: str) -> str:
    is_valid, errors = validate_password_strength(value)
    if not is_valid:
        raise ValueError("; ".join(errors))
    return value


class JobPreferences(CamelModel):
    """Job preferences nested object"""

    work_type: WorkType = "No preference"


# ==================== Requests ====================


class ProfileFields(CamelModel):
    """Optional job-tracking profile fields shared by register and profile update."""

    current_title: Optional[ShortText] = None
    target_salary: Optional[float] = Field(None, ge=0, description="Target salary cannot be negative")
    location: Optional[ShortText] = None
    industry: Optional[ShortText] = None
    skills: Optional[List[str]] = None
    job_preferences: Optional[JobPreferences] = None
    employment_type: Optional[EmploymentType] = None

    def to_fields(self) -> dict:
        """Fields the client actually sent, keyed by model attribute name."""
        fields = self.model_dump(exclude_unset=True)
        if self.job_preferences is not None:
            fields["job_preferences"] = self.job_preferences.model_dump(by_alias=True)
        return fields


class RegisterRequest(ProfileFields):
    """Register request schema."""

    first_name: Name
    last_name: Name
    email: EmailStr
    password: str = Field(..., description="8+ characters with upper, lower case letters and a digit")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _check_password(v)


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(ProfileFields):
    """
    Partial profile update.

    Unknown keys (email, password, isActive, isEmailVerified, ...) are ignored;
    those values change only through their dedicated flows.
    """

    first_name: Optional[Name] = None
    last_name: Optional[Name] = None


class ChangePasswordRequest(CamelModel):
    """Change password request schema."""

    current_password: str = Field(..., min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v):
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirmation do not match")
        return self


class PasswordResetRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    reset_password_token: str = Field(..., min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v):
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirmation do not match")
        return self


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1)


# ==================== Responses ====================


class UserResponse(CamelModel):
    """External user representation; never carries the hash or token pairs."""

    id: UUID
    first_name: str
    last_name: str
    full_name: str
    email: str
    current_title: Optional[str] = None
    target_salary: Optional[float] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    skills: Optional[List[str]] = None
    job_preferences: JobPreferences
    employment_type: str
    is_email_verified: bool
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


def public_user(user: User) -> UserResponse:
    """Project a ``User`` row onto its external representation."""
    return UserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=full_name(user.first_name, user.last_name),
        email=user.email,
        current_title=user.current_title,
        target_salary=user.target_salary,
        location=user.location,
        industry=user.industry,
        skills=user.skills,
        job_preferences=JobPreferences(**(user.job_preferences or {})),
        employment_type=user.employment_type,
        is_email_verified=user.is_email_verified,
        is_active=user.is_active,
        last_login=user.last_login,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class MessageResponse(BaseModel):
    """Envelope with no payload."""

    success: bool = True
    message: str


class UserEnvelope(MessageResponse):
    user: UserResponse


class AuthResponse(MessageResponse):
    """Register / login / refresh response schema."""

    user: UserResponse
    token: str


class TokenUser(BaseModel):
    id: str
    email: str


class ValidateResponse(MessageResponse):
    user: TokenUser
