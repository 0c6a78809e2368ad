import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import (
    CompleteProfileRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from app.services.auth_middleware import get_current_user
from app.services.auth_service import AuthService
from app.services.registry import get_auth_service
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


def _profile(user: User) -> dict:
    return ProfileResponse.model_validate(user).model_dump()


@router.post("/register")
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        result = service.register(db, body)
        return create_response(
            message="User registered successfully",
            data={"token": result.token, "token_type": "bearer", "user": _profile(result.user)},
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error during registration")


@router.post("/login")
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        result = service.login(db, body.email, body.password)
        return create_response(
            message="Login successful",
            data={"token": result.token, "token_type": "bearer", "user": _profile(result.user)},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error during login")


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    try:
        return create_response(
            message="User fetched successfully",
            data=_profile(current_user),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error fetching user data")


@router.put("/complete-profile")
def complete_profile(
    body: CompleteProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        user = service.complete_oauth_profile(db, current_user, body.postal_code)
        return create_response(
            message="Profile completed successfully",
            data=_profile(user),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error completing profile")


@router.post("/verify-email")
def verify_email(
    body: VerifyEmailRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        user = service.verify_email(db, current_user, body.code)
        return create_response(
            message="Email verified successfully",
            data={"id": user.id, "email": user.email, "is_email_verified": user.is_email_verified},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error verifying email")


@router.post("/resend-verification")
def resend_verification(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        service.resend_verification_code(db, current_user)
        return create_response(
            message="Verification code sent",
            data={"email": current_user.email},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error resending verification code")


@router.post("/forgot-password")
def forgot_password(
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        message = service.forgot_password(db, body.email)
        return create_response(message=message, data=None, status_code=status.HTTP_200_OK)
    except Exception as exc:
        return handle_exception(exc, "Error sending password reset email")


@router.put("/reset-password/{token}")
def reset_password(
    token: str,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    try:
        service.reset_password(db, token, body.new_password)
        return create_response(
            message="Password reset successful. You can now login with your new password.",
            data=None,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Error resetting password")
