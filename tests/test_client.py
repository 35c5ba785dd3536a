import httpx
import pytest

from taskmate.client import ApiClient, ApiError, ClientSession, TaskController

from .helpers import PASSWORD


@pytest.fixture()
def api(client):
    return ApiClient(http=client)


@pytest.fixture()
def controller(api):
    api.signup("Ann", "ann@x.com", PASSWORD)
    controller = TaskController(api)
    controller.refresh()
    return controller


def test_signup_fills_session(api):
    user = api.signup("Ann", "ann@x.com", PASSWORD)

    assert api.session.is_authenticated
    assert user["email"] == "ann@x.com"
    assert api.get_current_user()["_id"] == user["_id"]


def test_login_and_logout(api):
    api.signup("Ann", "ann@x.com", PASSWORD)
    api.logout()
    assert not api.session.is_authenticated

    api.login("ann@x.com", PASSWORD)
    assert api.session.user["name"] == "Ann"


def test_errors_carry_server_message(api):
    with pytest.raises(ApiError) as exc_info:
        api.login("ann@x.com", "wrong-password")
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Invalid email or password"


def test_password_reset_helpers(api):
    api.signup("Ann", "ann@x.com", PASSWORD)
    api.logout()

    assert api.check_email("ann@x.com") is True
    assert api.reset_password("ann@x.com", "another-secret") == "Password reset successfully"
    api.login("ann@x.com", "another-secret")


def test_network_errors_become_api_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient(http=httpx.Client(base_url="http://taskmate.invalid", transport=httpx.MockTransport(refuse)))
    with pytest.raises(ApiError) as exc_info:
        api.health_check()
    assert exc_info.value.status_code == 0


def test_add_puts_new_task_first(controller):
    controller.add("first")
    controller.add("  second  ")

    assert [task["title"] for task in controller.tasks] == ["second", "first"]
    assert controller.progress == (0, 2)


def test_add_blank_title_is_refused_locally(controller):
    assert controller.add("   ") is None
    assert controller.last_error == "Task title is required"
    assert controller.tasks == []


def test_toggle_round_trip(controller):
    task = controller.add("Buy milk")

    done = controller.toggle(task["_id"])
    assert (done["status"], done["isComplete"]) == ("completed", True)
    assert controller.progress == (1, 1)

    undone = controller.toggle(task["_id"])
    assert (undone["status"], undone["isComplete"]) == ("pending", False)


def test_move_between_columns(controller):
    task = controller.add("Write report")

    assert controller.move(task["_id"], "ongoing")["status"] == "ongoing"
    assert controller.move(task["_id"], "completed")["isComplete"] is True
    assert controller.move(task["_id"], "pending")["isComplete"] is False


def test_move_to_unknown_column(controller):
    task = controller.add("Write report")
    assert controller.move(task["_id"], "archived") is None
    assert controller.tasks[0]["status"] == "pending"


def test_failed_update_rolls_back(controller, api):
    task = controller.add("Vanishing")
    before = [dict(t) for t in controller.tasks]
    api.delete_task(task["_id"])

    assert controller.toggle(task["_id"]) is None
    assert controller.last_error == "Task not found"
    assert controller.tasks == before


def test_failed_rename_keeps_old_title(controller):
    task = controller.add("Short")

    assert controller.rename(task["_id"], "x" * 201) is None
    assert controller.last_error == "Task title cannot exceed 200 characters"
    assert controller.tasks[0]["title"] == "Short"

    assert controller.rename(task["_id"], "Longer")["title"] == "Longer"
    assert controller.last_error is None


def test_remove(controller):
    task = controller.add("Temp")
    assert controller.remove(task["_id"]) is True
    assert controller.tasks == []
    assert controller.remove(task["_id"]) is False


def test_busy_task_refuses_second_action(controller):
    task = controller.add("Busy")
    controller.busy.add(task["_id"])

    assert controller.toggle(task["_id"]) is None
    assert controller.tasks[0]["isComplete"] is False
    assert "in progress" in controller.last_error


def test_restore_with_valid_token(client, controller):
    controller.add("persisted")
    session = ClientSession(token=controller.api.session.token)

    restored = TaskController(ApiClient(http=client, session=session))
    assert restored.restore() is True
    assert restored.user["email"] == "ann@x.com"
    assert [task["title"] for task in restored.tasks] == ["persisted"]


def test_restore_with_bad_token_clears_session(client):
    api = ApiClient(http=client, session=ClientSession(token="stale"))
    controller = TaskController(api)

    assert controller.restore() is False
    assert api.session.token is None
    assert controller.tasks == []


def test_logout_clears_board(controller):
    controller.add("bye")
    controller.logout()

    assert controller.tasks == []
    assert controller.refresh() is False


def test_non_json_success_reply_is_reported_not_raised():
    def html_reply(request):
        return httpx.Response(200, text="<html>proxy login</html>")

    api = ApiClient(http=httpx.Client(base_url="http://taskmate.invalid", transport=httpx.MockTransport(html_reply)))
    with pytest.raises(ApiError) as exc_info:
        api.get_tasks()
    assert exc_info.value.message == "Invalid server response"

    controller = TaskController(api)
    assert controller.add("Buy milk") is None
    assert controller.last_error == "Invalid server response"
    assert controller.tasks == []
