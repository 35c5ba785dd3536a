"""Task status rules.

Any status can move to any other; the only guarantee is that ``status`` and
the derived ``isComplete`` flag never disagree. The board UI drags cards
freely between the three columns, so no transition is ever refused here.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from ..errors import ValidationError


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"


INVALID_STATUS_MESSAGE = "Invalid status. Must be pending, ongoing, or completed"


@dataclass(frozen=True)
class TaskPatch:
    """Requested changes to a task; ``None`` means "leave as is"."""
    title: Optional[str] = None
    status: Optional[Union[TaskStatus, str]] = None
    is_complete: Optional[bool] = None


def parse_status(value: Union[TaskStatus, str]) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(INVALID_STATUS_MESSAGE) from None


def is_complete(status: TaskStatus) -> bool:
    return status is TaskStatus.COMPLETED


def reconcile(
    current: TaskStatus,
    status: Optional[Union[TaskStatus, str]] = None,
    is_complete: Optional[bool] = None,
) -> TaskStatus:
    """Return the status a task ends up in after a patch.

    An explicit ``status`` wins over ``is_complete``. Clearing completion on a
    completed task always lands on ``pending``.
    """
    if status is not None:
        return parse_status(status)
    if is_complete is None:
        return current
    if is_complete:
        return TaskStatus.COMPLETED
    if current is TaskStatus.COMPLETED:
        return TaskStatus.PENDING
    return current
