from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List

from taskflow.core.database import get_db
from taskflow.core.errors import Conflict, route_errors
from taskflow.models.user import User
from taskflow.routers.deps import get_current_user, get_current_session
from taskflow.schemas.user import ProfileUpdate, UserEnvelope, UserPublic
from taskflow.services import user_service

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(get_current_session)])


@router.get("", response_model=List[UserPublic])
def list_users(db: Session = Depends(get_db)):
    with route_errors("Failed to get users", db):
        return user_service.list_users(db)


@router.patch("/me", response_model=UserEnvelope)
def update_profile(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Maj du profil (display name, username)"""
    with route_errors("Failed to update profile", db):
        update_data = profile.model_dump(exclude_unset=True)

        new_username = update_data.get("username")
        if new_username and new_username != current_user.username:
            if user_service.get_user_by_username(db, new_username):
                raise Conflict("Username already taken")

        try:
            user = user_service.update_user(db, current_user.id, **update_data)
        except IntegrityError:
            # username pris entre la vérification et le commit
            db.rollback()
            raise Conflict("Username already taken")
        return {"user": user_service.to_public(user)}
