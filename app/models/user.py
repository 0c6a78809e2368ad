from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthMethod(str, Enum):
    local = "local"
    oauth = "oauth"


class Role(str, Enum):
    user = "user"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String, unique=True, index=True, nullable=False)
    postal_code = Column(String, nullable=True)
    profile_picture = Column(String, nullable=True)

    # Credentials; never serialized
    password_hash = Column(String, nullable=True)
    auth_method = Column(String, nullable=False, default=AuthMethod.local.value)
    oauth_provider_id = Column(String, unique=True, nullable=True, index=True)

    is_email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_code = Column(String, nullable=True)
    email_verification_expires = Column(DateTime(timezone=True), nullable=True)

    # SHA-256 digest of the raw reset token
    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    role = Column(String, nullable=False, default=Role.user.value)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin.value

    @property
    def is_oauth(self) -> bool:
        return self.auth_method == AuthMethod.oauth.value

    def set_password(self, plaintext: str, hasher) -> None:
        """Store the hash of ``plaintext``; the only way a password reaches the record."""
        self.password_hash = hasher.hash(plaintext)

    def check_password(self, plaintext: str, hasher) -> bool:
        return hasher.verify(plaintext, self.password_hash)

    def link_oauth(self, provider_id: str, picture: str | None = None) -> None:
        self.oauth_provider_id = provider_id
        self.auth_method = AuthMethod.oauth.value
        self.is_email_verified = True
        if picture:
            self.profile_picture = picture
