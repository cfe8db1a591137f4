"""Autorité de session : émission et vérification des tokens signés.

Un seul vérificateur, utilisé à l'identique par les routes HTTP (cookie ou
header Bearer) et par le handshake websocket.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Response
from jose import JWTError, jwt
from starlette.requests import cookie_parser

from taskflow.core.config import settings
from taskflow.core.errors import Unauthenticated

ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str


def issue_session_token(user_id: str, email: str) -> str:
    #crée un token de session JWT valable 7 jours
    payload = {
        "userId": user_id,
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.SESSION_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=ALGORITHM)


def verify_session_token(token: Optional[str]) -> SessionClaims:
    if not token:
        raise Unauthenticated("Authentication required")

    try:
        payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        # signature invalide, token malformé ou expiré
        raise Unauthenticated("Invalid or expired token")

    user_id = payload.get("userId")
    email = payload.get("email")
    if not user_id or not email:
        raise Unauthenticated("Invalid or expired token")

    return SessionClaims(user_id=str(user_id), email=email)


def token_from_cookie_header(cookie_header: Optional[str]) -> Optional[str]:
    """Extrait le token de session d'un header Cookie brut.

    Parse tolérant de Starlette, comme `request.cookies` : un cookie voisin
    hors RFC (JSON, espaces) ne fait pas perdre le token.
    """
    if not cookie_header:
        return None
    return cookie_parser(cookie_header).get(settings.SESSION_COOKIE_NAME) or None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
