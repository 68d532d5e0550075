"""Authentication endpoints."""

from fastapi import APIRouter, Depends, Response, status

from app.config import settings
from app.core.deps import get_auth_service, get_current_identity
from app.core.security import TokenIdentity
from app.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenUser,
    UserEnvelope,
    ValidateResponse,
    VerifyEmailRequest,
)
from app.services.auth_service import AuthService

router = APIRouter()


def set_auth_cookie(response: Response, token: str) -> None:
    """httponly, same-site strict cookie; secure only in production."""
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.AUTH_COOKIE_MAX_AGE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    result = await auth.register(request.to_fields())
    set_auth_cookie(response, result.token)
    return AuthResponse(message="User registered successfully", user=result.user, token=result.token)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """Login with email and password."""
    result = await auth.login(request.email, request.password)
    set_auth_cookie(response, result.token)
    return AuthResponse(message="Login successful", user=result.user, token=result.token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, identity: TokenIdentity = Depends(get_current_identity)):
    """Logout (clears the cookie; Bearer clients should discard their token)."""
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
async def get_me(
    identity: TokenIdentity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """Get current user profile."""
    user = await auth.get_profile(identity.user_id)
    return UserEnvelope(message="Profile retrieved successfully", user=user)


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    request: ProfileUpdateRequest,
    identity: TokenIdentity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """Update profile fields; email, password and account flags are not accepted here."""
    user = await auth.update_profile(identity.user_id, request.to_fields())
    return UserEnvelope(message="Profile updated successfully", user=user)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    identity: TokenIdentity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.change_password(identity.user_id, request.current_password, request.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(
    request: PasswordResetRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Always answers with the same message so account existence is not revealed."""
    message = await auth.request_password_reset(request.email)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    await auth.reset_password(request.reset_password_token, request.new_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/send-verification-email", response_model=MessageResponse)
async def send_verification_email(
    identity: TokenIdentity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.send_verification_email(identity.user_id)
    return MessageResponse(message="Verification email sent")


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    request: VerifyEmailRequest,
    auth: AuthService = Depends(get_auth_service),
):
    await auth.verify_email(request.token)
    return MessageResponse(message="Email verified successfully")


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    response: Response,
    identity: TokenIdentity = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """Issue a new token for the authenticated user."""
    result = await auth.refresh_auth_token(identity.user_id)
    set_auth_cookie(response, result.token)
    return AuthResponse(message="Token refreshed successfully", user=result.user, token=result.token)


@router.get("/validate", response_model=ValidateResponse)
async def validate_token(identity: TokenIdentity = Depends(get_current_identity)):
    """Lets the frontend check whether its token is still accepted."""
    return ValidateResponse(
        message="Token is valid",
        user=TokenUser(id=identity.user_id, email=identity.email),
    )
