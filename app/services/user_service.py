import logging

from sqlalchemy.orm import Session

from app.models.user import AuthMethod, User
from app.schemas.user import ProfileUpdate
from app.services.password_service import PasswordHasher
from app.utils.errors import InvalidCredentials, NotFound, ValidationFailed, WrongAuthMethod

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "postal_code")
# ids are stored as signed 64-bit integers
MAX_USER_ID = 2**63 - 1


class UserService:
    def __init__(self, hasher: PasswordHasher):
        self.hasher = hasher

    def update_profile(self, db: Session, user: User, changes: ProfileUpdate) -> User:
        update_data = changes.model_dump(exclude_unset=True)
        for field in EDITABLE_FIELDS:
            value = update_data.get(field)
            # blank values leave the field untouched
            if value and value.strip():
                setattr(user, field, value.strip())
        db.commit()
        db.refresh(user)
        return user

    def change_password(self, db: Session, user: User, current_password: str, new_password: str) -> None:
        if user.auth_method != AuthMethod.local.value:
            raise WrongAuthMethod("Cannot change password for OAuth accounts")
        if not user.check_password(current_password, self.hasher):
            raise InvalidCredentials("Current password is incorrect")
        if current_password == new_password:
            raise ValidationFailed("New password must be different from current password")

        user.set_password(new_password, self.hasher)
        db.commit()
        logger.info("Password changed for user %s", user.id)

    def deactivate(self, db: Session, user: User) -> None:
        user.is_active = False
        db.commit()
        logger.info("User %s deactivated", user.id)

    def list_active_users(self, db: Session) -> list[User]:
        return db.query(User).filter(User.is_active.is_(True)).order_by(User.id.asc()).all()

    def get_user(self, db: Session, user_id: int) -> User:
        if not 1 <= user_id <= MAX_USER_ID:
            raise NotFound()
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound()
        return user
