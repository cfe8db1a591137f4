"""Task model"""

import enum
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey
from taskflow.core.database import Base
from taskflow.models.user import new_id, utcnow


class Priority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class Status(str, enum.Enum):
    todo = "todo"
    in_progress = "in_progress"
    review = "review"
    completed = "completed"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    assigned_to_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True, index=True)
    priority = Column(Enum(Priority, name="priority"), nullable=False, default=Priority.medium, index=True)
    status = Column(Enum(Status, name="status"), nullable=False, default=Status.todo, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
