import hashlib
import logging
import secrets
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import AuthMethod, User, utcnow
from app.services.password_service import PasswordHasher

logger = logging.getLogger(__name__)

VERIFICATION_CODE_DIGITS = 6
RESET_TOKEN_BYTES = 32


def generate_verification_code() -> str:
    return f"{secrets.randbelow(10 ** VERIFICATION_CODE_DIGITS):0{VERIFICATION_CODE_DIGITS}d}"


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


class SecretManager:
    """Issues and consumes one-time verification codes and password reset tokens.

    Consumption is a single conditional UPDATE: the row only changes when the
    stored secret matches and has not expired, so a secret can succeed once.
    """

    def __init__(self, config: Settings, hasher: PasswordHasher):
        self._code_lifetime = timedelta(minutes=config.VERIFICATION_CODE_EXPIRE_MINUTES)
        self._reset_lifetime = timedelta(minutes=config.RESET_TOKEN_EXPIRE_MINUTES)
        self._hasher = hasher

    def stage_verification_code(self, user: User) -> str:
        """Set a fresh code on the user without committing."""
        code = generate_verification_code()
        user.email_verification_code = code
        user.email_verification_expires = utcnow() + self._code_lifetime
        return code

    def issue_verification_code(self, db: Session, user: User) -> str:
        code = self.stage_verification_code(user)
        db.commit()
        db.refresh(user)
        logger.info("Verification code issued for user %s", user.id)
        return code

    def consume_verification_code(self, db: Session, user_id: int, submitted_code: str) -> bool:
        if not submitted_code:
            return False
        result = db.execute(
            update(User)
            .where(
                User.id == user_id,
                User.email_verification_code == submitted_code.strip(),
                User.email_verification_expires > utcnow(),
            )
            .values(
                is_email_verified=True,
                email_verification_code=None,
                email_verification_expires=None,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        consumed = result.rowcount == 1
        logger.info("Verification code for user %s consumed=%s", user_id, consumed)
        return consumed

    def issue_reset_token(self, db: Session, email: str) -> str | None:
        user = db.query(User).filter(User.email == User.normalize_email(email)).first()
        if not user:
            return None

        raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
        # a new request supersedes any outstanding token
        user.password_reset_token = hash_reset_token(raw_token)
        user.password_reset_expires = utcnow() + self._reset_lifetime
        db.commit()
        logger.info("Password reset token issued for user %s", user.id)
        return raw_token

    def consume_reset_token(self, db: Session, raw_token: str, new_password: str) -> bool:
        if not raw_token:
            return False
        result = db.execute(
            update(User)
            .where(
                User.password_reset_token == hash_reset_token(raw_token),
                User.password_reset_expires > utcnow(),
                User.auth_method == AuthMethod.local.value,
            )
            .values(
                password_hash=self._hasher.hash(new_password),
                password_reset_token=None,
                password_reset_expires=None,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        consumed = result.rowcount == 1
        logger.info("Password reset token consumed=%s", consumed)
        return consumed
