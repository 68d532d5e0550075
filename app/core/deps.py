"""Dependency functions for FastAPI routes."""
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ExpiredTokenError, TokenError, UnauthenticatedError
from app.core.security import PasswordHasher, TokenIdentity, TokenService
from app.db.session import get_db
from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService
from app.services.notification_service import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

# auto_error=False: the cookie is checked first and a missing header is not an error yet
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service; raises MissingSecretError when SECRET_KEY is unset."""
    return TokenService(settings)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


@lru_cache
def get_notifier() -> Notifier:
    return LoggingNotifier(settings.CLIENT_URL)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    notifier: Notifier = Depends(get_notifier),
) -> AuthService:
    """Auth service bound to the request's database session."""
    return AuthService(UserRepository(db), hasher, tokens, notifier, settings)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenIdentity:
    """
    Authenticate the request from the ``token`` cookie or the Bearer header.

    The cookie wins when both are present. Expired and malformed tokens get the
    same 401 response; only the log tells them apart.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials

    if not token:
        raise UnauthenticatedError("No token provided")

    try:
        identity = tokens.verify_auth_token(token)
    except ExpiredTokenError:
        logger.info("Rejected expired auth token")
        raise UnauthenticatedError()
    except TokenError as e:
        logger.warning(f"Rejected malformed auth token: {e}")
        raise UnauthenticatedError()

    request.state.identity = identity
    return identity
