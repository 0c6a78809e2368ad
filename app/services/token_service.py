import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from app.config import Settings
from app.utils.errors import InvalidToken

ACCESS_TOKEN_TYPE = "access"
STATE_TOKEN_TYPE = "oauth_state"


def _has_canonical_signature(token: str) -> bool:
    # the last base64url character carries unused bits that decoders ignore
    signature = token.rsplit(".", 1)[-1].encode("ascii")
    try:
        return base64url_encode(base64url_decode(signature)) == signature
    except ValueError:
        return False


class TokenIssuer:
    """Mints and checks signed, time-limited bearer tokens."""

    def __init__(self, config: Settings):
        self._secret = config.JWT_SECRET
        self._algorithm = config.ALGORITHM
        self._access_lifetime = timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS)
        self._state_lifetime = timedelta(minutes=config.OAUTH_STATE_EXPIRE_MINUTES)

    def _encode(self, claims: dict, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = claims.copy()
        to_encode.update({"iat": now, "exp": now + lifetime})
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def _decode(self, token: str, expected_type: str) -> dict:
        if not token:
            raise InvalidToken("Token missing")
        if not _has_canonical_signature(token):
            raise InvalidToken("Invalid token signature")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken("Invalid or expired token") from exc
        if payload.get("type") != expected_type:
            raise InvalidToken("Invalid token type")
        return payload

    def issue(self, identity_id: int, lifetime: timedelta | None = None) -> str:
        return self._encode(
            {"sub": str(identity_id), "type": ACCESS_TOKEN_TYPE},
            lifetime or self._access_lifetime,
        )

    def verify(self, token: str) -> int:
        payload = self._decode(token, ACCESS_TOKEN_TYPE)
        subject = payload.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError) as exc:
            raise InvalidToken("Invalid token payload") from exc

    def issue_state(self) -> str:
        # nonce keeps every authorization request distinct
        return self._encode(
            {"type": STATE_TOKEN_TYPE, "nonce": secrets.token_urlsafe(16)},
            self._state_lifetime,
        )

    def verify_state(self, state: str) -> None:
        self._decode(state, STATE_TOKEN_TYPE)
