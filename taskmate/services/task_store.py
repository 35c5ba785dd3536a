"""Owner-scoped task persistence.

Every query filters on ``user_id``: a task that belongs to someone else is
reported exactly like one that does not exist.
"""

import logging
from typing import List, Optional

from sqlmodel import Session, select

from ..errors import TaskNotFoundError, ValidationError
from ..models import Task
from ..models.common import OBJECT_ID_PATTERN, utcnow
from .task_state import TaskPatch, TaskStatus, reconcile

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200


def normalize_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Task title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Task title cannot exceed {TITLE_MAX_LENGTH} characters")
    return title


def check_task_id(task_id: Optional[str]) -> str:
    if not task_id or not OBJECT_ID_PATTERN.fullmatch(task_id):
        raise ValidationError("Invalid task ID")
    return task_id.lower()


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def list(self, owner_id: str) -> List[Task]:
        """All of the owner's tasks, newest first."""
        query = (
            select(Task)
            .where(Task.user_id == owner_id)
            .order_by(Task.created_at.desc())
        )
        return list(self.db.exec(query).all())

    def get(self, owner_id: str, task_id: str) -> Task:
        task_id = check_task_id(task_id)
        task = self.db.exec(
            select(Task).where(Task.id == task_id, Task.user_id == owner_id)
        ).first()
        if task is None:
            raise TaskNotFoundError()
        return task

    def create(self, owner_id: str, title: Optional[str]) -> Task:
        task = Task(title=normalize_title(title), status=TaskStatus.PENDING, user_id=owner_id)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.debug("Created task %s for user %s", task.id, owner_id)
        return task

    def update(self, owner_id: str, task_id: str, patch: TaskPatch) -> Task:
        """Apply ``patch`` to one of the owner's tasks.

        Validation happens before anything is written, so a bad field leaves
        the task untouched. Concurrent updates are not serialised; the last
        commit wins.
        """
        task = self.get(owner_id, task_id)

        title = normalize_title(patch.title) if patch.title is not None else None
        status = reconcile(task.status, patch.status, patch.is_complete)

        if title is not None:
            task.title = title
        task.status = status
        task.updated_at = utcnow()

        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, owner_id: str, task_id: str) -> None:
        task = self.get(owner_id, task_id)
        self.db.delete(task)
        self.db.commit()
        logger.debug("Deleted task %s for user %s", task_id, owner_id)
