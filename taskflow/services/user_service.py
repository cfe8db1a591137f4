"""User service - accès au store des utilisateurs"""

from sqlalchemy.orm import Session
from typing import List, Optional
from taskflow.models.user import User
from taskflow.schemas.user import UserPublic


def to_public(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(db: Session, username: str, email: str, password: str, display_name: Optional[str] = None) -> User:
    user = User(username=username, email=email, display_name=display_name)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: str, **fields) -> Optional[User]:
    user = get_user(db, user_id)
    if not user:
        return None
    for field, value in fields.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session) -> List[UserPublic]:
    return [to_public(u) for u in db.query(User).order_by(User.created_at.asc()).all()]
