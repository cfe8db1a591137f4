"""
Diffusion des événements de tâches vers toutes les connexions websocket ouvertes.

Pas de rooms ni de topics : chaque publish part vers tout le monde, sans
file d'attente par client. Un client déconnecté perd l'événement, son
prochain GET /api/tasks est la seule reprise.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional
from uuid import uuid4

from fastapi import WebSocket

from taskflow.core.security import SessionClaims

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Connection:
    websocket: WebSocket
    identity: Optional[SessionClaims] = None
    id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def user_id(self) -> Optional[str]:
        return self.identity.user_id if self.identity else None


class Broadcaster:
    def __init__(self):
        self.connections: List[Connection] = []

    async def connect(self, websocket: WebSocket, identity: Optional[SessionClaims] = None) -> Connection:
        await websocket.accept()
        connection = Connection(websocket=websocket, identity=identity)
        self.connections.append(connection)
        logger.info(f"Client connected: {connection.id} (user={connection.user_id or 'anonymous'})")
        return connection

    def disconnect(self, connection: Connection) -> None:
        if connection in self.connections:
            self.connections.remove(connection)
            logger.info(f"Client disconnected: {connection.id}")

    async def publish(self, event: str, payload: Any) -> None:
        message = {"event": event, "data": payload}
        logger.debug(f"Publishing {event} to {len(self.connections)} connection(s)")

        # copie : une connexion morte peut être retirée pendant la boucle
        for connection in list(self.connections):
            try:
                await connection.websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping connection {connection.id}: {e}")
                self.disconnect(connection)


broadcaster = Broadcaster()


def get_broadcaster() -> Broadcaster:
    return broadcaster
