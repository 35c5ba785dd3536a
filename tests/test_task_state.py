import pytest

from taskmate.errors import ValidationError
from taskmate.services.task_state import TaskStatus, is_complete, parse_status, reconcile

ALL = list(TaskStatus)


@pytest.mark.parametrize("current", ALL)
@pytest.mark.parametrize("target", ALL)
def test_any_status_reachable_from_any_other(current, target):
    assert reconcile(current, status=target.value) is target


@pytest.mark.parametrize("current", ALL)
def test_completing_always_lands_on_completed(current):
    assert reconcile(current, is_complete=True) is TaskStatus.COMPLETED


def test_uncompleting_a_completed_task_reverts_to_pending():
    assert reconcile(TaskStatus.COMPLETED, is_complete=False) is TaskStatus.PENDING


def test_uncompleting_keeps_ongoing_and_pending_as_they_are():
    assert reconcile(TaskStatus.ONGOING, is_complete=False) is TaskStatus.ONGOING
    assert reconcile(TaskStatus.PENDING, is_complete=False) is TaskStatus.PENDING


def test_status_takes_precedence_over_is_complete():
    assert reconcile(TaskStatus.PENDING, status="ongoing", is_complete=True) is TaskStatus.ONGOING
    assert reconcile(TaskStatus.PENDING, status="completed", is_complete=False) is TaskStatus.COMPLETED


def test_empty_patch_keeps_status():
    assert reconcile(TaskStatus.ONGOING) is TaskStatus.ONGOING


def test_unknown_status_rejected():
    with pytest.raises(ValidationError) as exc_info:
        parse_status("done")
    assert "pending, ongoing, or completed" in exc_info.value.message


def test_is_complete_projection():
    assert is_complete(TaskStatus.COMPLETED)
    assert not is_complete(TaskStatus.ONGOING)
    assert not is_complete(TaskStatus.PENDING)
