import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from taskflow.core.database import get_db
from taskflow.core.errors import Conflict, Unauthenticated, route_errors
from taskflow.core.security import issue_session_token, set_session_cookie, clear_session_cookie
from taskflow.models.user import User
from taskflow.routers.deps import get_current_user
from taskflow.schemas.user import RegisterRequest, LoginRequest, UserEnvelope, MessageResponse
from taskflow.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# même message pour email inconnu et mauvais mdp, on ne dit pas lequel a échoué
INVALID_CREDENTIALS = "Invalid email or password"

@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(user_data: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """Créer un nouvel utilisateur et ouvrir sa session"""
    with route_errors("Registration failed", db):
        # Vérifie si l'email existe déjà
        if user_service.get_user_by_email(db, user_data.email):
            raise Conflict("Email already in use")

        # Vérifie si le username existe déjà
        if user_service.get_user_by_username(db, user_data.username):
            raise Conflict("Username already taken")

        try:
            new_user = user_service.create_user(
                db,
                username=user_data.username,
                email=user_data.email,
                password=user_data.password,
                display_name=user_data.display_name
            )
        except IntegrityError:
            # deux inscriptions simultanées, la contrainte unique tranche
            db.rollback()
            raise Conflict("Email or username already in use")

        set_session_cookie(response, issue_session_token(new_user.id, new_user.email))
        logger.info(f"User registered: {new_user.id}")

        return {"user": user_service.to_public(new_user)}

@router.post("/login", response_model=UserEnvelope)
def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Se connecter, le token part dans le cookie de session"""
    with route_errors("Login failed", db):
        # Cherche l'utilisateur avec son mail
        user = user_service.get_user_by_email(db, credentials.email)
        if not user:
            raise Unauthenticated(INVALID_CREDENTIALS)

        # Vérifie le mdp
        if not user.verify_password(credentials.password):
            raise Unauthenticated(INVALID_CREDENTIALS)

        set_session_cookie(response, issue_session_token(user.id, user.email))

        return {"user": user_service.to_public(user)}

@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logged out successfully"}

@router.get("/me", response_model=UserEnvelope)
def me(current_user: User = Depends(get_current_user)):
    return {"user": user_service.to_public(current_user)}
