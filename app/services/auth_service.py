"""Account lifecycle service: registration, login, profile, passwords, email verification."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict

from fastapi.concurrency import run_in_threadpool

from app.config import Settings
from app.core.exceptions import (
    AccountDeactivatedError,
    AlreadyVerifiedError,
    DuplicateEmailError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from app.core.security import PasswordHasher, TokenService
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import UserResponse, public_user
from app.services.notification_service import NotificationPurpose, Notifier
from app.utils.helpers import normalize_email, strip_strings, utcnow

logger = logging.getLogger(__name__)

PASSWORD_RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."

# Writable through update_profile
PROFILE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "current_title",
    "target_salary",
    "location",
    "industry",
    "skills",
    "job_preferences",
    "employment_type",
})

# Never writable through update_profile; they have dedicated flows
PROTECTED_FIELDS = frozenset({
    "password",
    "password_hash",
    "email",
    "is_active",
    "is_email_verified",
    "email_verification_token",
    "email_verification_expire",
    "reset_password_token",
    "reset_password_expire",
})


@dataclass
class AuthResult:
    """Sanitized user plus a freshly issued auth token."""

    user: UserResponse
    token: str


class AuthService:
    """
    Orchestrates the account flows on top of the credential store, the
    password hasher and the token service.

    One instance per request (it holds the request's repository); the hasher,
    token service and notifier are process-wide and shared.
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        notifier: Notifier,
        config: Settings,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier
        self.reset_token_lifetime = timedelta(minutes=config.RESET_TOKEN_EXPIRE_MINUTES)
        self.verification_token_lifetime = timedelta(hours=config.VERIFICATION_TOKEN_EXPIRE_HOURS)

    # ==================== Helpers ====================

    async def _set_password(self, user: User, password: str) -> None:
        """Every password write goes through the hasher; bcrypt runs off the event loop."""
        user.password_hash = await run_in_threadpool(self.hasher.hash, password)

    async def _password_matches(self, user: User, password: str) -> bool:
        return await run_in_threadpool(self.hasher.verify, password, user.password_hash)

    async def _get_active_user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError()
        if not user.is_active:
            raise AccountDeactivatedError("Account has been deactivated")
        return user

    def _issue_token(self, user: User) -> str:
        return self.tokens.issue_auth_token(user.id, user.email)

    # ==================== Registration & login ====================

    async def register(self, fields: Dict[str, Any]) -> AuthResult:
        """
        Create an account and sign it in.

        Args:
            fields: first_name, last_name, email, password plus optional profile fields

        Raises:
            DuplicateEmailError: email already registered (case-insensitive)
            ValidationError: a field violates the user constraints
        """
        for required in ("first_name", "last_name", "email", "password"):
            if not fields.get(required):
                raise ValidationError("First name, last name, email, and password are required")

        email = normalize_email(fields["email"])
        if await self.users.find_by_email(email):
            raise DuplicateEmailError()

        profile = strip_strings({key: value for key, value in fields.items() if key in PROFILE_FIELDS})
        user = User(email=email, **profile)
        await self._set_password(user, fields["password"])
        await self.users.save(user)

        logger.info(f"Registered user {user.id} ({user.email})")
        return AuthResult(user=public_user(user), token=self._issue_token(user))

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials and issue a token.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        The active flag is checked only after the password matched.
        """
        user = await self.users.find_by_email(email)

        if user is None or not await self._password_matches(user, password):
            logger.info("Login failed: invalid credentials")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.info(f"Login refused for deactivated user {user.id}")
            raise AccountDeactivatedError()

        user.last_login = utcnow()
        await self.users.save(user)

        logger.info(f"Login: {user.email} ({user.id})")
        return AuthResult(user=public_user(user), token=self._issue_token(user))

    async def refresh_auth_token(self, user_id: str) -> AuthResult:
        """Re-issue an auth token for an existing, active account."""
        user = await self.users.find_by_id(user_id)
        if not user or not user.is_active:
            raise UnauthenticatedError("Token refresh failed")
        return AuthResult(user=public_user(user), token=self._issue_token(user))

    # ==================== Profile ====================

    async def get_profile(self, user_id: str) -> UserResponse:
        return public_user(await self._get_active_user(user_id))

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> UserResponse:
        """
        Apply a partial profile update.

        Protected fields are dropped from ``fields`` before anything is applied;
        unknown keys are ignored. String values are trimmed.
        """
        user = await self._get_active_user(user_id)

        ignored = PROTECTED_FIELDS.intersection(fields)
        if ignored:
            logger.warning(f"Ignoring protected fields in profile update for {user_id}: {sorted(ignored)}")

        updates = strip_strings({key: value for key, value in fields.items() if key in PROFILE_FIELDS})
        for key, value in updates.items():
            setattr(user, key, value)

        await self.users.save(user)
        return public_user(user)

    # ==================== Passwords ====================

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = await self._get_active_user(user_id)

        if not await self._password_matches(user, current_password):
            raise IncorrectPasswordError()

        await self._set_password(user, new_password)
        # An outstanding reset link would otherwise still override the new password
        user.clear_reset_token()
        await self.users.save(user)
        logger.info(f"Password changed for user {user.id}")

    async def request_password_reset(self, email: str) -> str:
        """
        Issue a reset token when the account exists; the returned message is
        identical either way.
        """
        user = await self.users.find_by_email(email)
        if not user or not user.is_active:
            logger.info("Password reset requested for unknown or inactive account")
            return PASSWORD_RESET_REQUESTED_MESSAGE

        issued = self.tokens.issue_single_use_token(self.reset_token_lifetime)
        user.reset_password_token = issued.token_hash
        user.reset_password_expire = issued.expires_at
        await self.users.save(user)

        try:
            await self.notifier.send(user.email, issued.token, NotificationPurpose.PASSWORD_RESET)
        except Exception:
            logger.exception(f"Failed to deliver password reset token to user {user.id}")

        return PASSWORD_RESET_REQUESTED_MESSAGE

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Consume a reset token.

        Raises:
            InvalidOrExpiredTokenError: token unknown, already used, superseded or expired
        """
        user = await self.users.find_by_valid_reset_token(token, utcnow())
        if not user:
            raise InvalidOrExpiredTokenError("Invalid or expired reset token")

        await self._set_password(user, new_password)
        user.clear_reset_token()
        await self.users.save(user)
        logger.info(f"Password reset completed for user {user.id}")

    # ==================== Email verification ====================

    async def send_verification_email(self, user_id: str) -> None:
        user = await self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError()
        if user.is_email_verified:
            raise AlreadyVerifiedError()

        issued = self.tokens.issue_single_use_token(self.verification_token_lifetime)
        user.email_verification_token = issued.token_hash
        user.email_verification_expire = issued.expires_at
        await self.users.save(user)

        try:
            await self.notifier.send(user.email, issued.token, NotificationPurpose.EMAIL_VERIFICATION)
        except Exception:
            logger.exception(f"Failed to deliver verification token to user {user.id}")

    async def verify_email(self, token: str) -> None:
        user = await self.users.find_by_valid_verification_token(token, utcnow())
        if not user:
            raise InvalidOrExpiredTokenError("Invalid or expired verification token")

        user.is_email_verified = True
        user.clear_verification_token()
        await self.users.save(user)
        logger.info(f"Email verified for user {user.id}")
