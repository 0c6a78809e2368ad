import logging

import httpx
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client

from app.config import Settings
from app.schemas.user import OAuthProfile
from app.services.token_service import TokenIssuer

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPE = "openid email profile"


class OAuthProviderError(Exception):
    """The provider handshake could not produce a usable profile."""


class GoogleOAuthClient:
    """Stateless authorization-code handshake with Google.

    The ``state`` parameter is a short-lived signed token rather than a value
    kept in a server-side session.
    """

    def __init__(self, config: Settings, issuer: TokenIssuer):
        self._config = config
        self._issuer = issuer

    @property
    def configured(self) -> bool:
        return self._config.google_configured

    @property
    def frontend_url(self) -> str:
        return self._config.FRONTEND_URL

    def _client(self) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=self._config.GOOGLE_CLIENT_ID,
            client_secret=self._config.GOOGLE_CLIENT_SECRET,
            scope=GOOGLE_SCOPE,
            redirect_uri=self._config.GOOGLE_REDIRECT_URI,
        )

    def authorization_url(self) -> str:
        client = self._client()
        url, _ = client.create_authorization_url(
            GOOGLE_AUTHORIZE_URL,
            state=self._issuer.issue_state(),
            prompt="select_account",
        )
        return url

    async def fetch_profile(self, code: str | None, state: str | None) -> OAuthProfile:
        if not code:
            raise OAuthProviderError("Authorization code missing")
        self._issuer.verify_state(state)

        try:
            async with self._client() as client:
                await client.fetch_token(GOOGLE_TOKEN_URL, code=code)
                response = await client.get(GOOGLE_USERINFO_URL)
                response.raise_for_status()
                userinfo = response.json()
        except (OAuthError, httpx.HTTPError) as exc:
            raise OAuthProviderError(f"Google token exchange failed: {exc}") from exc

        if not userinfo.get("sub"):
            raise OAuthProviderError("Unable to read Google profile")

        logger.info("Google profile fetched for subject %s", userinfo["sub"])
        return OAuthProfile(
            provider_id=str(userinfo["sub"]),
            email=userinfo.get("email"),
            # older endpoints send the flag as a string
            email_verified=userinfo.get("email_verified") in (True, "true"),
            first_name=userinfo.get("given_name") or userinfo.get("name"),
            last_name=userinfo.get("family_name"),
            picture=userinfo.get("picture"),
        )
