"""Task service - CRUD des tâches + enrichissement créateur / assigné"""

from sqlalchemy.orm import Session
from datetime import datetime, timezone
from dateutil.parser import isoparse
from typing import List, Optional
from taskflow.core.errors import ValidationFailed
from taskflow.models.task import Task
from taskflow.models.user import utcnow
from taskflow.schemas.task import TaskCreate, TaskUpdate, TaskWithRelations
from taskflow.services.user_service import get_user, to_public


def parse_due_date(value: Optional[str]) -> Optional[datetime]:
    """
    Convertit une date ISO ("2025-03-01" ou "2025-03-01T10:00:00Z") en datetime UTC naïf.
    Chaîne vide ou None -> None.
    """
    if not value:
        return None
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError):
        raise ValidationFailed("Invalid due date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def enrich_task(db: Session, task: Task) -> TaskWithRelations:
    # Toujours relu depuis le store : un user renommé apparaît tout de suite
    creator = get_user(db, task.creator_id)
    assignee = get_user(db, task.assigned_to_id) if task.assigned_to_id else None
    return TaskWithRelations(
        id=task.id,
        title=task.title,
        description=task.description,
        due_date=task.due_date,
        priority=task.priority,
        status=task.status,
        creator_id=task.creator_id,
        assigned_to_id=task.assigned_to_id,
        created_at=task.created_at,
        updated_at=task.updated_at,
        creator=to_public(creator),
        assigned_to=to_public(assignee) if assignee else None,
    )


def create_task(db: Session, fields: TaskCreate, creator_id: str) -> TaskWithRelations:
    now = utcnow()
    task = Task(
        creator_id=creator_id,
        assigned_to_id=fields.assigned_to_id,
        title=fields.title,
        description=fields.description,
        due_date=parse_due_date(fields.due_date),
        priority=fields.priority,
        status=fields.status,
        created_at=now,
        updated_at=now
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return enrich_task(db, task)


def get_task(db: Session, task_id: str) -> Optional[TaskWithRelations]:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        return None
    return enrich_task(db, task)


def list_tasks(
    db: Session,
    creator_id: Optional[str] = None,
    assigned_to_id: Optional[str] = None
) -> List[TaskWithRelations]:
    query = db.query(Task)

    if creator_id:
        query = query.filter(Task.creator_id == creator_id)

    if assigned_to_id:
        query = query.filter(Task.assigned_to_id == assigned_to_id)

    tasks = query.order_by(Task.created_at.desc()).all()
    return [enrich_task(db, t) for t in tasks]


def update_task(db: Session, task_id: str, patch: TaskUpdate) -> Optional[TaskWithRelations]:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        return None

    # exclude_unset : absent != null (dueDate: null efface la date)
    update_data = patch.model_dump(exclude_unset=True)
    if "due_date" in update_data:
        update_data["due_date"] = parse_due_date(update_data["due_date"])

    for field, value in update_data.items():
        setattr(task, field, value)

    task.updated_at = max(utcnow(), task.created_at)

    db.commit()
    db.refresh(task)
    return enrich_task(db, task)


def delete_task(db: Session, task_id: str) -> bool:
    deleted = db.query(Task).filter(Task.id == task_id).delete()
    db.commit()
    return deleted > 0
