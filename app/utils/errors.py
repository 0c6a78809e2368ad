from fastapi import HTTPException, status


class InvalidToken(Exception):
    """Raised when a bearer or state token cannot be trusted."""


class AppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Request failed"

    def __init__(self, detail: str | None = None, errors: list[str] | dict | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.message)
        self.errors = errors

    @property
    def code(self) -> str:
        return type(self).__name__


class ValidationFailed(AppError):
    message = "Validation failed"


class DuplicateEmail(AppError):
    message = "User already exists with this email"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class WrongAuthMethod(AppError):
    message = "This account uses Google sign-in. Please login with Google."


class AccountDeactivated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Account has been deactivated"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authorized, token failed"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized as admin"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class MissingField(AppError):
    message = "Required field is missing"


class AlreadyVerified(AppError):
    message = "Email is already verified"


class InvalidOrExpiredCode(AppError):
    message = "Invalid or expired verification code"


class InvalidOrExpiredToken(AppError):
    message = "Invalid or expired reset token"


class ServerError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
