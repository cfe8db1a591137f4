from typing import Optional

from taskflow.realtime.broadcaster import Broadcaster
from taskflow.schemas.task import TaskWithRelations

TASK_CREATED = "task:created"
TASK_UPDATED = "task:updated"
TASK_ASSIGNED = "task:assigned"
TASK_DELETED = "task:deleted"

TASK_EVENTS = (TASK_CREATED, TASK_UPDATED, TASK_ASSIGNED, TASK_DELETED)


def _dump(task: TaskWithRelations) -> dict:
    return task.model_dump(mode="json", by_alias=True)


async def task_created(broadcaster: Broadcaster, task: TaskWithRelations) -> None:
    await broadcaster.publish(TASK_CREATED, {"taskId": task.id, "data": _dump(task)})


async def task_updated(broadcaster: Broadcaster, task: TaskWithRelations, previous_assignee_id: Optional[str]) -> None:
    """task:updated toujours, puis task:assigned si un nouvel assigné non nul a été posé."""
    data = _dump(task)
    await broadcaster.publish(TASK_UPDATED, {"taskId": task.id, "data": data})

    if task.assigned_to_id and task.assigned_to_id != previous_assignee_id:
        await broadcaster.publish(
            TASK_ASSIGNED,
            {"taskId": task.id, "userId": task.assigned_to_id, "data": data}
        )


async def task_deleted(broadcaster: Broadcaster, task_id: str) -> None:
    await broadcaster.publish(TASK_DELETED, {"taskId": task_id})
