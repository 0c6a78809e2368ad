import logging

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.utils.errors import AppError

logger = logging.getLogger(__name__)


def create_response(
    message: str,
    data=None,
    status_code: int = status.HTTP_200_OK,
    status_text: str | None = None,
    errors=None,
) -> JSONResponse:
    """Return a consistent API response payload and status code."""
    success = status_code < 400
    payload_status = status_text or ("success" if success else "error")
    content = {
        "success": success,
        "message": message,
        "data": jsonable_encoder(data),
        "status": payload_status,
        "status_code": status_code,
    }
    if errors:
        content["errors"] = jsonable_encoder(errors)
    return JSONResponse(status_code=status_code, content=content)


def handle_exception(error: Exception, fallback_message: str = "Internal server error") -> JSONResponse:
    """Coerce raised errors into the shared response structure."""
    if isinstance(error, AppError):
        return create_response(error.detail, None, error.status_code, status_text="error", errors=error.errors)

    if isinstance(error, HTTPException):
        detail = error.detail if isinstance(error.detail, str) else str(error.detail)
        return create_response(detail, None, error.status_code, status_text="error")

    logger.exception("Unhandled error: %s", fallback_message)
    return create_response(fallback_message, None, status.HTTP_500_INTERNAL_SERVER_ERROR, status_text="error")
