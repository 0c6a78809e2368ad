"""Authentication flows: registration, login, Google sign-in and linking,
email verification, and password reset.

Every flow shares the ``User`` row as its state. Durable changes are
committed before any email is attempted, and a failed delivery never undoes
the change that triggered it.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import AuthMethod, User
from app.schemas.user import OAuthProfile, RegisterRequest
from app.services.email_services import Notifier
from app.services.password_service import PasswordHasher
from app.services.secret_service import SecretManager
from app.services.token_service import TokenIssuer
from app.utils.errors import (
    AccountDeactivated,
    AlreadyVerified,
    DuplicateEmail,
    InvalidCredentials,
    InvalidOrExpiredCode,
    InvalidOrExpiredToken,
    MissingField,
    ValidationFailed,
    WrongAuthMethod,
)

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a password reset link has been sent"


@dataclass
class AuthResult:
    token: str
    user: User
    needs_postal_code: bool = False


class AuthService:
    def __init__(
        self,
        config: Settings,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        secrets: SecretManager,
        notifier: Notifier,
    ):
        self.config = config
        self.hasher = hasher
        self.issuer = issuer
        self.secrets = secrets
        self.notifier = notifier

    def _find_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == User.normalize_email(email)).first()

    def register(self, db: Session, payload: RegisterRequest) -> AuthResult:
        email = User.normalize_email(payload.email)
        if self._find_by_email(db, email):
            raise DuplicateEmail()

        user = User(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=email,
            postal_code=payload.postal_code.strip() if payload.postal_code else None,
            auth_method=AuthMethod.local.value,
            is_email_verified=False,
        )
        user.set_password(payload.password, self.hasher)
        code = self.secrets.stage_verification_code(user)
        db.add(user)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise DuplicateEmail() from exc
        db.refresh(user)
        logger.info("Registered local user %s", user.id)

        if not self.notifier.send_verification_email(user.email, code):
            logger.warning("Verification email for user %s was not delivered", user.id)

        return AuthResult(token=self.issuer.issue(user.id), user=user)

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        user = self._find_by_email(db, email)
        if not user:
            raise InvalidCredentials()
        if user.auth_method != AuthMethod.local.value:
            raise WrongAuthMethod()
        if not user.is_active:
            raise AccountDeactivated()
        if not user.check_password(password, self.hasher):
            raise InvalidCredentials()

        logger.info("User %s logged in", user.id)
        return AuthResult(token=self.issuer.issue(user.id), user=user)

    def oauth_login(self, db: Session, profile: OAuthProfile) -> AuthResult:
        email = User.normalize_email(profile.email)
        if not email:
            raise ValidationFailed("Google profile did not include an email address")
        if not profile.email_verified:
            raise ValidationFailed("Google email address is not verified")

        user = self._find_by_email(db, email)
        if user:
            if not user.is_active:
                raise AccountDeactivated()
            if user.auth_method == AuthMethod.local.value:
                user.link_oauth(profile.provider_id, profile.picture)
                logger.info("Linked Google account to local user %s", user.id)
            elif not user.oauth_provider_id:
                user.oauth_provider_id = profile.provider_id
        else:
            user = User(
                first_name=profile.first_name or email.split("@")[0],
                last_name=profile.last_name or "",
                email=email,
                auth_method=AuthMethod.oauth.value,
                oauth_provider_id=profile.provider_id,
                profile_picture=profile.picture,
                is_email_verified=True,
            )
            db.add(user)
            logger.info("Creating Google user for %s", email)

        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ValidationFailed("Google account is already linked to another user") from exc
        db.refresh(user)

        return AuthResult(
            token=self.issuer.issue(user.id),
            user=user,
            needs_postal_code=not user.postal_code,
        )

    def complete_oauth_profile(self, db: Session, user: User, postal_code: str | None) -> User:
        postal_code = (postal_code or "").strip()
        if not postal_code:
            raise MissingField("Postal code is required")
        user.postal_code = postal_code
        db.commit()
        db.refresh(user)
        return user

    def verify_email(self, db: Session, user: User, code: str) -> User:
        if not self.secrets.consume_verification_code(db, user.id, code):
            raise InvalidOrExpiredCode()
        db.refresh(user)
        logger.info("Email verified for user %s", user.id)
        return user

    def resend_verification_code(self, db: Session, user: User) -> None:
        if user.is_email_verified:
            raise AlreadyVerified()
        code = self.secrets.issue_verification_code(db, user)
        if not self.notifier.send_verification_email(user.email, code):
            logger.warning("Verification email for user %s was not delivered", user.id)

    def forgot_password(self, db: Session, email: str) -> str:
        user = self._find_by_email(db, email)
        if not user:
            return FORGOT_PASSWORD_MESSAGE
        if user.auth_method != AuthMethod.local.value:
            raise WrongAuthMethod("Account uses Google sign-in. Please login with Google")

        raw_token = self.secrets.issue_reset_token(db, user.email)
        if raw_token and not self.notifier.send_password_reset_email(user.email, raw_token):
            logger.warning("Password reset email for user %s was not delivered", user.id)
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, db: Session, raw_token: str, new_password: str) -> None:
        if not self.secrets.consume_reset_token(db, raw_token, new_password):
            raise InvalidOrExpiredToken()
