"""Pydantic schemas for task request/response validation."""

from pydantic import field_validator
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Optional

from taskflow.models.task import Priority, Status
from taskflow.schemas.user import CamelModel, UserPublic

TITLE_MAX_LENGTH = 100


def _check_title(value: str) -> str:
    if len(value) < 1:
        raise PydanticCustomError("title_required", "Title is required")
    if len(value) > TITLE_MAX_LENGTH:
        raise PydanticCustomError("title_length", "Title must be 100 characters or less")
    return value


class TaskCreate(CamelModel):
    title: str
    description: Optional[str] = None
    due_date: Optional[str] = None
    priority: Priority = Priority.medium
    status: Status = Status.todo
    assigned_to_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return _check_title(value)


class TaskUpdate(CamelModel):
    """Patch partiel : seuls les champs envoyés sont appliqués (model_fields_set)."""

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    assigned_to_id: Optional[str] = None

    @field_validator("title", "priority", "status", mode="before")
    @classmethod
    def reject_null(cls, value, info):
        # null explicite interdit pour ces champs (description, dueDate, assignedToId acceptent null)
        if value is None:
            raise PydanticCustomError("null_not_allowed", "{field} cannot be null", {"field": info.field_name})
        return value

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return _check_title(value)


class TaskWithRelations(CamelModel):
    id: str
    title: str
    description: Optional[str]
    due_date: Optional[datetime]
    priority: Priority
    status: Status
    creator_id: str
    assigned_to_id: Optional[str]
    created_at: datetime
    updated_at: datetime

    creator: UserPublic
    assigned_to: Optional[UserPublic]
