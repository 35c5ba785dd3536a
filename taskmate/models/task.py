from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional

from ..services import task_state
from ..services.task_state import TaskStatus
from .common import new_object_id, utcnow


class Task(SQLModel, table=True):
    """A to-do item owned by exactly one user.

    ``status`` is the only stored state; ``is_complete`` is derived from it.
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    title: str = Field(max_length=200)
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    user_id: str = Field(foreign_key="users.id", index=True)

    # Relationship back to user
    user: Optional["User"] = Relationship(back_populates="tasks")

    @property
    def is_complete(self) -> bool:
        return task_state.is_complete(self.status)
