from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import PasswordChange, ProfileResponse, ProfileUpdate
from app.services.auth_middleware import get_current_admin, get_current_user
from app.services.registry import get_user_service
from app.services.user_service import UserService
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/users", tags=["Users"])


@router.put("/profile")
def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
):
    try:
        user = service.update_profile(db, current_user, update)
        return create_response(
            message="Profile updated successfully",
            data=ProfileResponse.model_validate(user).model_dump(),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error updating profile")


@router.put("/password")
def change_password(
    body: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
):
    try:
        service.change_password(db, current_user, body.current_password, body.new_password)
        return create_response(
            message="Password changed successfully",
            data=None,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error changing password")


@router.delete("/account")
def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
):
    try:
        service.deactivate(db, current_user)
        return create_response(
            message="Account deactivated successfully",
            data={"deactivated": True},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error deactivating account")


@router.get("")
def list_users(
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
):
    try:
        users = service.list_active_users(db)
        payload = [ProfileResponse.model_validate(user).model_dump() for user in users]
        return create_response(
            message="Users fetched successfully",
            data={"count": len(payload), "users": payload},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error fetching users")


@router.get("/{user_id}")
def get_user(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
):
    try:
        user = service.get_user(db, user_id)
        return create_response(
            message="User fetched successfully",
            data=ProfileResponse.model_validate(user).model_dump(),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error fetching user")
