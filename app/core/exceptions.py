"""Typed failures raised by the account services.

Every ``AuthError`` carries the HTTP status and the client-safe message the API
layer puts in the response envelope. Token-layer errors (``TokenError``) stay
internal: the request gate logs which kind occurred and answers with a plain
``UnauthenticatedError``.
"""

from typing import Any, Dict, List, Optional

from fastapi import status


class AuthError(Exception):
    """Base class for failures that map directly onto an API response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class DuplicateEmailError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User with this email already exists"


class InvalidCredentialsError(AuthError):
    """Unknown email and wrong password share this error and its message."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class IncorrectPasswordError(InvalidCredentialsError):
    """Wrong current password on an authenticated password change."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Current password is incorrect"


class AccountDeactivatedError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account has been deactivated. Please contact support."


class UnauthenticatedError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class NotFoundError(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class InvalidOrExpiredTokenError(AuthError):
    """A reset/verification token that never existed, was used, or expired."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid or expired token"


class AlreadyVerifiedError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Email is already verified"


# Token layer


class TokenError(Exception):
    """Signed auth token could not be verified."""


class ExpiredTokenError(TokenError):
    pass


class MalformedTokenError(TokenError):
    pass


class MissingSecretError(RuntimeError):
    """SECRET_KEY is not configured; the application must not start."""
