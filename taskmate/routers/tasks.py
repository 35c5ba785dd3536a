from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ..database import get_db
from ..models import User
from ..schemas.task import TaskCreate, TaskUpdate, build_task_payload
from ..services.task_state import TaskPatch
from ..services.task_store import TaskStore
from .auth import get_current_user

router = APIRouter()


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    return TaskStore(db)


@router.get("")
def get_tasks(
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
):
    """List the current user's tasks, newest first."""
    tasks = store.list(current_user.id)
    return {"success": True, "data": {"tasks": [build_task_payload(task) for task in tasks]}}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
):
    db_task = store.create(current_user.id, task.title)
    return {
        "success": True,
        "message": "Task created successfully",
        "data": {"task": build_task_payload(db_task)},
    }


@router.put("/{task_id}")
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
):
    """Update title and/or status of a task.

    ``status`` and ``isComplete`` may both be sent; ``status`` wins.
    """
    patch = TaskPatch(
        title=task_update.title,
        status=task_update.status,
        is_complete=task_update.isComplete,
    )
    task = store.update(current_user.id, task_id, patch)
    return {
        "success": True,
        "message": "Task updated successfully",
        "data": {"task": build_task_payload(task)},
    }


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
):
    store.delete(current_user.id, task_id)
    return {"success": True, "message": "Task deleted successfully"}
