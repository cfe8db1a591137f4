from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from typing import Optional

from taskflow.core.config import settings
from taskflow.core.database import get_db
from taskflow.core.errors import NotFound
from taskflow.core.security import SessionClaims, verify_session_token
from taskflow.models.user import User
from taskflow.services.user_service import get_user


def get_current_session(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> SessionClaims:
    # Header Bearer (clients API) sinon cookie de session (navigateur)
    if authorization and authorization.startswith("Bearer "):
        token = authorization.replace("Bearer ", "", 1)
    else:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)

    return verify_session_token(token)


def get_current_user(
    db: Session = Depends(get_db),
    session: SessionClaims = Depends(get_current_session)
) -> User:
    user = get_user(db, session.user_id)
    if not user:
        raise NotFound("User not found")
    return user
