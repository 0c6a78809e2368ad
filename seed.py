import logging

from app.config import settings
from app.database import Base, SessionLocal, engine
from app.models.user import AuthMethod, Role, User
from app.services.password_service import password_hasher

logger = logging.getLogger(__name__)


def seed_admin(db, email: str | None, password: str | None) -> User | None:
    """Create the configured admin account, or promote an existing one."""
    email = User.normalize_email(email)
    if not email or not password:
        return None

    user = db.query(User).filter(User.email == email).first()
    if user:
        if user.role != Role.admin.value:
            user.role = Role.admin.value
            db.commit()
            logger.info("Promoted %s to admin", email)
        return user

    user = User(
        first_name="Admin",
        last_name="",
        email=email,
        auth_method=AuthMethod.local.value,
        role=Role.admin.value,
        is_email_verified=True,
    )
    user.set_password(password, password_hasher)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Seeded admin account %s", email)
    return user


def run_seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    run_seed()
