"""Security utilities: password hashing, JWT auth tokens, single-use tokens."""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import Settings
from app.core.exceptions import ExpiredTokenError, MalformedTokenError, MissingSecretError
from app.utils.helpers import generate_hash, utcnow

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


class PasswordHasher:
    """bcrypt hashing with a fresh salt per call."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        """Constant-time comparison against a bcrypt hash; any failure is a mismatch."""
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except (ValueError, TypeError) as e:
            logger.warning(f"Password hash verification failed: {type(e).__name__}")
            return False


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried by a verified auth token."""

    user_id: str
    email: str


@dataclass(frozen=True)
class SingleUseToken:
    """Opaque reset/verification token; only ``token_hash`` is persisted."""

    token: str
    token_hash: str
    expires_at: datetime


class TokenService:
    """
    Issues and verifies signed auth tokens and opaque single-use tokens.

    The signing key comes from the settings object passed in; an empty key is a
    misconfiguration and fails here, at construction, not per request.
    """

    def __init__(self, config: Settings):
        if not config.SECRET_KEY:
            raise MissingSecretError("SECRET_KEY is not defined in the environment")
        self._secret_key = config.SECRET_KEY
        self.algorithm = config.ALGORITHM
        self.access_token_expire = timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS)

    def issue_auth_token(
        self,
        user_id: UUID | str,
        email: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a JWT carrying user id and email."""
        issued_at = utcnow()
        expire = issued_at + (expires_delta if expires_delta is not None else self.access_token_expire)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": expire,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify_auth_token(self, token: str) -> TokenIdentity:
        """
        Decode and verify a JWT.

        Raises:
            ExpiredTokenError: signature is valid but ``exp`` has passed
            MalformedTokenError: bad signature, bad structure or missing claims
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except JWTError as e:
            raise MalformedTokenError("Invalid token") from e

        user_id = payload.get("sub")
        email = payload.get("email")
        if payload.get("type") != ACCESS_TOKEN_TYPE or not user_id or not email:
            raise MalformedTokenError("Invalid token claims")

        return TokenIdentity(user_id=user_id, email=email)

    def issue_single_use_token(self, lifetime: timedelta) -> SingleUseToken:
        token = secrets.token_hex(32)
        return SingleUseToken(
            token=token,
            token_hash=self.hash_single_use_token(token),
            expires_at=utcnow() + lifetime,
        )

    @staticmethod
    def hash_single_use_token(token: str) -> str:
        return generate_hash(token)
