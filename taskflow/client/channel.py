"""
Canal temps réel côté client : websocket /ws -> TaskReconciler.

Un thread lit les frames et les passe telles quelles à
`reconciler.handle_message`. Le canal est push-only, rien n'est envoyé.
"""

import logging
import threading
from typing import Any, Callable, Optional
from urllib.parse import urlencode

from websockets.exceptions import ConnectionClosed
from websockets.sync.client import connect as ws_connect

from taskflow.client.api import DEFAULT_BASE_URL
from taskflow.client.reconciler import TaskReconciler

logger = logging.getLogger(__name__)

OPEN_TIMEOUT = 10
JOIN_TIMEOUT = 5


def websocket_url(base_url: str, token: Optional[str] = None) -> str:
    """http(s)://hote -> ws(s)://hote/ws?token=..."""
    base_url = base_url.rstrip("/")
    if base_url.startswith("https://"):
        base_url = "wss://" + base_url[len("https://"):]
    elif base_url.startswith("http://"):
        base_url = "ws://" + base_url[len("http://"):]

    url = f"{base_url}/ws"
    if token:
        url += "?" + urlencode({"token": token})
    return url


def _open(url: str) -> Any:
    return ws_connect(url, open_timeout=OPEN_TIMEOUT)


class TaskChannel:
    """
    Abonnement d'un client aux événements task:*.

    `connect` reçoit l'URL et renvoie une connexion itérable (frames texte)
    avec `close()` ; par défaut le client synchrone de `websockets`.
    """

    def __init__(
        self,
        reconciler: TaskReconciler,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        connect: Optional[Callable[[str], Any]] = None
    ):
        self.reconciler = reconciler
        self.url = websocket_url(base_url, token)
        self._open = connect or _open
        self.websocket = None
        self._thread: Optional[threading.Thread] = None

    @property
    def connected(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def connect(self) -> "TaskChannel":
        if self.connected:
            return self

        self.websocket = self._open(self.url)
        self._thread = threading.Thread(target=self._pump, name="taskflow-channel", daemon=True)
        self._thread.start()
        # pas de token dans les logs
        logger.info(f"Realtime channel connected to {self.url.split('?')[0]}")
        return self

    def _pump(self) -> None:
        try:
            for frame in self.websocket:
                try:
                    self.reconciler.handle_message(frame)
                except ValueError as e:
                    logger.warning(f"Ignoring malformed realtime frame: {e}")
        except ConnectionClosed as e:
            logger.info(f"Realtime channel closed by server: {e}")

    def disconnect(self) -> None:
        if self.websocket is not None:
            self.websocket.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=JOIN_TIMEOUT)
        self.websocket = None
        self._thread = None
        logger.info("Realtime channel disconnected")

    def __enter__(self) -> "TaskChannel":
        return self.connect()

    def __exit__(self, *exc) -> None:
        self.disconnect()
