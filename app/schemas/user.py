import re
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from app.services.password_service import MAX_PASSWORD_BYTES, password_too_long

PASSWORD_MIN_LENGTH = 7
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[^A-Za-z0-9]).+$")


def check_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if password_too_long(value):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must include at least one lowercase letter, one uppercase letter, "
            "and one special character"
        )
    return value


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Field cannot be blank")
    return value


StrongPassword = Annotated[str, AfterValidator(check_password_strength)]
RequiredName = Annotated[str, AfterValidator(_strip_required)]


class RegisterRequest(BaseModel):
    first_name: RequiredName = Field(alias="firstName")
    last_name: RequiredName = Field(alias="lastName")
    email: EmailStr
    password: StrongPassword
    postal_code: str | None = Field(default=None, alias="postalCode")

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class CompleteProfileRequest(BaseModel):
    postal_code: str | None = Field(default=None, alias="postalCode")

    model_config = {"populate_by_name": True}


class VerifyEmailRequest(BaseModel):
    code: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    new_password: StrongPassword = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    postal_code: str | None = Field(default=None, alias="postalCode")

    model_config = {"populate_by_name": True}


class PasswordChange(BaseModel):
    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: StrongPassword = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


class ProfileResponse(BaseModel):
    id: int
    first_name: str
    last_name: str | None
    email: str
    postal_code: str | None
    role: str
    auth_method: str
    profile_picture: str | None
    is_email_verified: bool
    is_active: bool
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class OAuthProfile(BaseModel):
    """Identity fields returned by the OAuth provider's userinfo endpoint."""

    provider_id: str
    email: str | None = None
    email_verified: bool = False
    first_name: str | None = None
    last_name: str | None = None
    picture: str | None = None
