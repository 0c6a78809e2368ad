import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.config import bearer_scheme
from app.database import get_db
from app.models.user import Role, User
from app.services.registry import get_token_issuer
from app.services.token_service import TokenIssuer
from app.utils.errors import AppError, Forbidden, InvalidToken, Unauthorized

logger = logging.getLogger(__name__)


@dataclass
class GateResult:
    user: User | None = None
    error: AppError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> User:
        if self.error is not None:
            raise self.error
        return self.user


def authenticate(token: str | None, db: Session, issuer: TokenIssuer) -> GateResult:
    if not token:
        return GateResult(error=Unauthorized("Not authorized, no token"))
    try:
        user_id = issuer.verify(token)
    except InvalidToken as exc:
        logger.info("Rejected bearer token: %s", exc)
        return GateResult(error=Unauthorized())

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return GateResult(error=Unauthorized("User not found"))
    if not user.is_active:
        return GateResult(error=Unauthorized("Account has been deactivated"))
    return GateResult(user=user)


def authorize(user: User, required_role: Role) -> GateResult:
    if user.role != required_role.value:
        return GateResult(error=Forbidden())
    return GateResult(user=user)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> User:
    token = None
    if credentials and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    return authenticate(token, db, issuer).unwrap()


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    return authorize(current_user, Role.admin).unwrap()
