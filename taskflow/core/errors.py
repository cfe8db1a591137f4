"""Erreurs métier et conversion en réponses HTTP.

Taxonomie :
- ValidationFailed -> 400
- Unauthenticated  -> 401
- Conflict         -> 400 (email / username déjà pris)
- NotFound         -> 404
- tout le reste    -> 500 avec un message générique, détail uniquement dans les logs
"""

import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


@contextmanager
def route_errors(default_message: str, db: Optional[Session] = None):
    """Frontière d'erreurs d'une route.

    Les erreurs métier et HTTPException passent telles quelles, le reste
    devient une 500 avec le message par défaut de la route.
    """
    try:
        yield
    except (AppError, HTTPException):
        raise
    except SQLAlchemyError:
        if db is not None:
            db.rollback()
        logger.exception(f"Database error: {default_message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=default_message
        )
    except Exception:
        if db is not None:
            db.rollback()
        logger.exception(f"Unexpected error: {default_message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=default_message
        )
