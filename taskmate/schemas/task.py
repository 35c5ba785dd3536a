from pydantic import BaseModel
from typing import Optional

from ..models import Task


class TaskCreate(BaseModel):
    """Body of ``POST /api/tasks``; the title is checked by the store."""
    title: Optional[str] = None


class TaskUpdate(BaseModel):
    """Body of ``PUT /api/tasks/{id}``. Omitted or null fields are left alone."""
    title: Optional[str] = None
    status: Optional[str] = None
    isComplete: Optional[bool] = None


def build_task_payload(task: Task) -> dict:
    return {
        "_id": task.id,
        "title": task.title,
        "status": task.status.value,
        "isComplete": task.is_complete,
        "userId": task.user_id,
        "createdAt": task.created_at.isoformat(),
        "updatedAt": task.updated_at.isoformat(),
    }
