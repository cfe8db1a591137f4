"""
Réconciliation côté client des événements temps réel.

Un événement task:* ne sert que de signal : on marque la liste en cache
comme périmée et on relit la vérité complète via GET /api/tasks. Aucun
merge champ par champ, le cache est soit frais, soit périmé.

Notifications :
- task:assigned -> seulement si userId == utilisateur connecté
- task:updated  -> notification générique sur le dashboard (notify_on_update),
  quelle que soit la tâche
"""

import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union

from taskflow.client.api import SessionExpired, TaskApi

logger = logging.getLogger(__name__)

AUTO_DISMISS_SECONDS = 4.0


@dataclass
class Notification:
    type: str
    title: str
    message: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: float = 0.0


class TaskReconciler:
    """
    État client d'une vue (liste de tâches ou dashboard).

    Les événements arrivent du thread du canal (TaskChannel), les lectures
    du thread appelant : l'état est protégé par un verrou.
    """

    def __init__(
        self,
        api: TaskApi,
        user_id: Optional[str],
        notify_on_update: bool = False,
        auto_dismiss_seconds: float = AUTO_DISMISS_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.api = api
        self.user_id = user_id
        self.notify_on_update = notify_on_update
        self.auto_dismiss_seconds = auto_dismiss_seconds
        self.clock = clock

        self.session_ended = False
        self._tasks: Optional[List[dict]] = None
        self._notifications: List[Notification] = []
        self._lock = threading.RLock()

    # ---- cache ----

    @property
    def is_stale(self) -> bool:
        return self._tasks is None

    def invalidate(self) -> None:
        with self._lock:
            self._tasks = None

    def tasks(self) -> List[dict]:
        """Liste en cache, relue entièrement si elle est périmée."""
        with self._lock:
            if self._tasks is None:
                self._tasks = self._call(self.api.list_tasks)
            return self._tasks

    def end_session(self) -> None:
        logger.info("Session expired, clearing local state")
        with self._lock:
            self.session_ended = True
            self.user_id = None
            self._tasks = None
            self._notifications = []

    def _call(self, method: Callable[..., Any], *args: Any) -> Any:
        # un 401 sur n'importe quelle route protégée termine la session
        try:
            return method(*args)
        except SessionExpired:
            self.end_session()
            raise

    # ---- événements poussés ----

    def handle_message(self, message: Union[str, dict]) -> None:
        if isinstance(message, str):
            message = json.loads(message)
        self.handle_event(message.get("event", ""), message.get("data") or {})

    def handle_event(self, event: str, payload: dict) -> None:
        if not event.startswith("task:"):
            return

        with self._lock:
            self.invalidate()

            if event == "task:assigned" and self.user_id and payload.get("userId") == self.user_id:
                task = payload.get("data") or {}
                self.notify(
                    "info",
                    "New task assigned",
                    f'You\'ve been assigned to "{task.get("title") or "a task"}"'
                )

            if event == "task:updated" and self.notify_on_update:
                self.notify("success", "Task updated", "A task has been updated in real-time")

    # ---- mutations : invalidation seulement si succès ----

    def create_task(self, fields: dict) -> dict:
        task = self._call(self.api.create_task, fields)
        self.invalidate()
        return task

    def update_task(self, task_id: str, fields: dict) -> dict:
        task = self._call(self.api.update_task, task_id, fields)
        self.invalidate()
        return task

    def delete_task(self, task_id: str) -> None:
        self._call(self.api.delete_task, task_id)
        self.invalidate()

    # ---- notifications ----

    def notify(self, type: str, title: str, message: Optional[str] = None) -> Notification:
        notification = Notification(type=type, title=title, message=message, created_at=self.clock())
        with self._lock:
            self._notifications.append(notification)
        return notification

    def dismiss(self, notification_id: str) -> None:
        with self._lock:
            self._notifications = [n for n in self._notifications if n.id != notification_id]

    def active_notifications(self) -> List[Notification]:
        now = self.clock()
        with self._lock:
            self._notifications = [
                n for n in self._notifications
                if now - n.created_at < self.auto_dismiss_seconds
            ]
            return list(self._notifications)
