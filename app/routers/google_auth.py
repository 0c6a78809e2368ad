import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.auth_service import AuthService
from app.services.google_auth_service import GoogleOAuthClient
from app.services.registry import get_auth_service, get_google_client
from app.utils.errors import ServerError
from app.utils.response import handle_exception

router = APIRouter(prefix="/auth/google", tags=["Google Auth"])
logger = logging.getLogger(__name__)


def _frontend_redirect(base_url: str, path: str, params: dict | None = None) -> RedirectResponse:
    url = f"{base_url}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("")
def google_login(client: GoogleOAuthClient = Depends(get_google_client)):
    try:
        if not client.configured:
            raise ServerError("Google OAuth not configured. Check GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.")
        return RedirectResponse(client.authorization_url(), status_code=status.HTTP_302_FOUND)
    except Exception as exc:
        return handle_exception(exc)


@router.get("/callback")
async def google_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
    client: GoogleOAuthClient = Depends(get_google_client),
    service: AuthService = Depends(get_auth_service),
):
    try:
        if error:
            logger.warning("Google sign-in returned error: %s", error)
            return _frontend_redirect(client.frontend_url, "/auth/error")

        profile = await client.fetch_profile(code, state)
        result = service.oauth_login(db, profile)
        return _frontend_redirect(
            client.frontend_url,
            "/auth/callback",
            {
                "token": result.token,
                "needsPostalCode": str(result.needs_postal_code).lower(),
            },
        )
    except Exception:
        logger.exception("Google callback error")
        return _frontend_redirect(client.frontend_url, "/auth/error")
