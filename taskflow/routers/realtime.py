"""Canal temps réel : websocket push-only sur /ws."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from taskflow.core.errors import Unauthenticated
from taskflow.core.security import SessionClaims, token_from_cookie_header, verify_session_token
from taskflow.realtime.broadcaster import Broadcaster, get_broadcaster

logger = logging.getLogger(__name__)

router = APIRouter()


def identify(websocket: WebSocket) -> Optional[SessionClaims]:
    """
    Auth du handshake, best-effort.
    Token explicite (?token=) en priorité, sinon le cookie transmis.
    Un token absent ou invalide donne une connexion anonyme, pas un refus.
    """
    token = websocket.query_params.get("token") or token_from_cookie_header(websocket.headers.get("cookie"))
    if not token:
        return None
    try:
        return verify_session_token(token)
    except Unauthenticated as e:
        logger.debug(f"Websocket handshake without identity: {e.message}")
        return None


@router.websocket("/ws")
async def task_events(websocket: WebSocket, broadcaster: Broadcaster = Depends(get_broadcaster)):
    connection = await broadcaster.connect(websocket, identify(websocket))
    try:
        while True:
            # aucun message client -> serveur n'est défini, on lit pour détecter la déconnexion
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(connection)
