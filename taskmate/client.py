"""Python client for the TaskMate API.

``ClientSession`` holds the token and user explicitly instead of keeping
them in ambient global storage. ``TaskController`` mirrors the board the
browser shows: a local task list kept in step with the server, rolled back
to the last confirmed state whenever a request fails.
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .errors import ValidationError
from .services.task_state import TaskStatus, parse_status, reconcile

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


@dataclass
class ClientSession:
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    def clear(self) -> None:
        self.token = None
        self.user = None


class ApiClient:
    """One method per endpoint. Non-2xx replies raise ``ApiError``."""

    def __init__(
        self,
        base_url: str = "",
        http: Optional[httpx.Client] = None,
        session: Optional[ClientSession] = None,
        timeout: float = 15.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.session = session or ClientSession()

    def request(self, method: str, endpoint: str, json: Optional[dict] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        try:
            response = self.http.request(method, endpoint, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("API request error: %s %s: %s", method, endpoint, exc)
            raise ApiError(0, "Network error, please try again") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiError(
                response.status_code,
                message or f"HTTP error! status: {response.status_code}",
            )
        if not isinstance(data, dict):
            logger.error("Unparseable reply to %s %s", method, endpoint)
            raise ApiError(response.status_code, "Invalid server response")
        return data

    def _start_session(self, data: dict) -> dict:
        self.session.token = data["data"]["token"]
        self.session.user = data["data"]["user"]
        return self.session.user

    def signup(self, name: str, email: str, password: str) -> dict:
        data = self.request("POST", "/api/auth/signup", {"name": name, "email": email, "password": password})
        return self._start_session(data)

    def login(self, email: str, password: str) -> dict:
        data = self.request("POST", "/api/auth/login", {"email": email, "password": password})
        return self._start_session(data)

    def logout(self) -> None:
        # Tokens are stateless; forgetting ours is the whole logout.
        self.session.clear()

    def check_email(self, email: str) -> bool:
        return self.request("POST", "/api/auth/check-email", {"email": email})["data"]["exists"]

    def reset_password(self, email: str, new_password: str) -> str:
        data = self.request("POST", "/api/auth/reset-password", {"email": email, "newPassword": new_password})
        return data.get("message", "")

    def get_current_user(self) -> dict:
        return self.request("GET", "/api/auth/me")["data"]["user"]

    def get_tasks(self) -> List[dict]:
        return self.request("GET", "/api/tasks")["data"]["tasks"]

    def create_task(self, title: str) -> dict:
        return self.request("POST", "/api/tasks", {"title": title})["data"]["task"]

    def update_task(self, task_id: str, **updates: Any) -> dict:
        return self.request("PUT", f"/api/tasks/{task_id}", updates)["data"]["task"]

    def delete_task(self, task_id: str) -> None:
        self.request("DELETE", f"/api/tasks/{task_id}")

    def health_check(self) -> dict:
        return self.request("GET", "/api/health")


class TaskController:
    """Local task list reconciled against the API.

    Actions never raise: a failure restores the last server-confirmed list,
    stores the message in ``last_error`` and returns ``None``/``False``.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.tasks: List[dict] = []
        self._confirmed: List[dict] = []
        self.busy: set = set()
        self.last_error: Optional[str] = None

    @property
    def user(self) -> Optional[dict]:
        return self.api.session.user

    @property
    def progress(self) -> Tuple[int, int]:
        completed = sum(1 for task in self.tasks if task["isComplete"])
        return completed, len(self.tasks)

    def _index(self, task_id: str) -> int:
        for i, task in enumerate(self.tasks):
            if task["_id"] == task_id:
                return i
        raise KeyError(task_id)

    def _confirm(self) -> None:
        self._confirmed = copy.deepcopy(self.tasks)

    def _rollback(self, message: str) -> None:
        logger.warning("Task action failed, restoring last known state: %s", message)
        self.tasks = copy.deepcopy(self._confirmed)
        self.last_error = message

    @contextmanager
    def _in_flight(self, key: str):
        self.busy.add(key)
        try:
            yield
        finally:
            self.busy.discard(key)

    def _refuse_if_busy(self, key: str) -> bool:
        if key in self.busy:
            self.last_error = "Another request for this task is still in progress"
            return True
        return False

    def restore(self) -> bool:
        """Re-validate a stored token and load the board if it is still good."""
        if not self.api.session.token:
            return False
        try:
            self.api.session.user = self.api.get_current_user()
        except ApiError as exc:
            logger.info("Stored session rejected: %s", exc.message)
            self.api.session.clear()
            self.tasks = []
            self._confirm()
            return False
        return self.refresh()

    def refresh(self) -> bool:
        if not self.api.session.is_authenticated:
            self.tasks = []
            self._confirm()
            return False
        try:
            self.tasks = self.api.get_tasks()
        except ApiError as exc:
            self._rollback(exc.message)
            return False
        self._confirm()
        self.last_error = None
        return True

    def logout(self) -> None:
        self.api.logout()
        self.tasks = []
        self._confirm()

    def add(self, title: str) -> Optional[dict]:
        if not title or not title.strip():
            self.last_error = "Task title is required"
            return None
        if self._refuse_if_busy("new"):
            return None
        with self._in_flight("new"):
            try:
                task = self.api.create_task(title)
            except ApiError as exc:
                self._rollback(exc.message)
                return None
        self.tasks.insert(0, task)
        self._confirm()
        self.last_error = None
        return task

    def _apply_optimistic(self, task_id: str, **updates: Any) -> Optional[dict]:
        if self._refuse_if_busy(task_id):
            return None
        try:
            index = self._index(task_id)
        except KeyError:
            self.last_error = "Task not found"
            return None

        local = dict(self.tasks[index])
        status = reconcile(parse_status(local["status"]), updates.get("status"), updates.get("isComplete"))
        local["status"] = status.value
        local["isComplete"] = status is TaskStatus.COMPLETED
        self.tasks[index] = local

        with self._in_flight(task_id):
            try:
                task = self.api.update_task(task_id, **updates)
            except ApiError as exc:
                self._rollback(exc.message)
                return None
        self.tasks[self._index(task_id)] = task
        self._confirm()
        self.last_error = None
        return task

    def toggle(self, task_id: str) -> Optional[dict]:
        try:
            current = self.tasks[self._index(task_id)]
        except KeyError:
            self.last_error = "Task not found"
            return None
        return self._apply_optimistic(task_id, isComplete=not current["isComplete"])

    def move(self, task_id: str, status: str) -> Optional[dict]:
        """Drag a task to another column."""
        try:
            status = parse_status(status).value
        except ValidationError as exc:
            self.last_error = exc.message
            return None
        return self._apply_optimistic(task_id, status=status)

    def rename(self, task_id: str, title: str) -> Optional[dict]:
        if self._refuse_if_busy(task_id):
            return None
        with self._in_flight(task_id):
            try:
                task = self.api.update_task(task_id, title=title)
            except ApiError as exc:
                self._rollback(exc.message)
                return None
        try:
            self.tasks[self._index(task_id)] = task
        except KeyError:
            self.tasks.insert(0, task)
        self._confirm()
        self.last_error = None
        return task

    def remove(self, task_id: str) -> bool:
        if self._refuse_if_busy(task_id):
            return False
        with self._in_flight(task_id):
            try:
                self.api.delete_task(task_id)
            except ApiError as exc:
                self._rollback(exc.message)
                return False
        self.tasks = [task for task in self.tasks if task["_id"] != task_id]
        self._confirm()
        self.last_error = None
        return True
