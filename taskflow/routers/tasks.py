import logging
from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import List, Optional

from taskflow.core.database import get_db
from taskflow.core.errors import NotFound, ValidationFailed, route_errors
from taskflow.core.security import SessionClaims
from taskflow.realtime import events
from taskflow.realtime.broadcaster import Broadcaster, get_broadcaster
from taskflow.routers.deps import get_current_session
from taskflow.schemas.task import TaskCreate, TaskUpdate, TaskWithRelations
from taskflow.schemas.user import MessageResponse
from taskflow.services import task_service
from taskflow.services.user_service import get_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _check_assignee(db: Session, assigned_to_id: Optional[str]) -> None:
    if assigned_to_id and not get_user(db, assigned_to_id):
        raise ValidationFailed("Assigned user not found")


@router.get("", response_model=List[TaskWithRelations])
def list_tasks(
    db: Session = Depends(get_db),
    session: SessionClaims = Depends(get_current_session),
    creator_id: Optional[str] = Query(None, alias="creatorId"),
    assigned_to_id: Optional[str] = Query(None, alias="assignedToId")
):
    with route_errors("Failed to get tasks", db):
        return task_service.list_tasks(db, creator_id=creator_id, assigned_to_id=assigned_to_id)


@router.get("/{task_id}", response_model=TaskWithRelations)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    session: SessionClaims = Depends(get_current_session)
):
    with route_errors("Failed to get task", db):
        task = task_service.get_task(db, task_id)
        if not task:
            raise NotFound("Task not found")
        return task


# appels SQLAlchemy (sync) dans le threadpool, jamais sur la boucle

@router.post("", response_model=TaskWithRelations, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    session: SessionClaims = Depends(get_current_session),
    broadcaster: Broadcaster = Depends(get_broadcaster)
):
    with route_errors("Failed to create task", db):
        await run_in_threadpool(_check_assignee, db, task_data.assigned_to_id)

        task = await run_in_threadpool(task_service.create_task, db, task_data, session.user_id)
        logger.info(f"Task {task.id} created by {session.user_id}")

        await events.task_created(broadcaster, task)
        return task


@router.patch("/{task_id}", response_model=TaskWithRelations)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    session: SessionClaims = Depends(get_current_session),
    broadcaster: Broadcaster = Depends(get_broadcaster)
):
    with route_errors("Failed to update task", db):
        # get avant update : un id inconnu donne une 404, pas un no-op
        existing = await run_in_threadpool(task_service.get_task, db, task_id)
        if not existing:
            raise NotFound("Task not found")

        if "assigned_to_id" in task_data.model_fields_set:
            await run_in_threadpool(_check_assignee, db, task_data.assigned_to_id)

        previous_assignee_id = existing.assigned_to_id

        # pas de transaction autour du get + update, un delete concurrent donne None ici
        task = await run_in_threadpool(task_service.update_task, db, task_id, task_data)
        if not task:
            raise NotFound("Task not found")

        await events.task_updated(broadcaster, task, previous_assignee_id)
        return task


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    session: SessionClaims = Depends(get_current_session),
    broadcaster: Broadcaster = Depends(get_broadcaster)
):
    with route_errors("Failed to delete task", db):
        existing = await run_in_threadpool(task_service.get_task, db, task_id)
        if not existing:
            raise NotFound("Task not found")

        if not await run_in_threadpool(task_service.delete_task, db, task_id):
            raise NotFound("Task not found")

        logger.info(f"Task {task_id} deleted by {session.user_id}")
        await events.task_deleted(broadcaster, task_id)
        return {"message": "Task deleted successfully"}
