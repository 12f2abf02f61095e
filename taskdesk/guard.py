from __future__ import annotations

from typing import Literal

from taskdesk.errors import ForbiddenError, NotFoundError
from taskdesk.models.task import Task
from taskdesk.observability import get_json_logger, get_metrics
from taskdesk.store.interface import TaskStore
from taskdesk.store.validation import validate_owner_id

DenyPolicy = Literal["forbidden", "not_found"]


def authorize(
    requesting_user_id: str, task: Task, *, policy: DenyPolicy = "forbidden"
) -> None:
    """Raise unless `requesting_user_id` owns `task`.

    With policy "not_found" a foreign task is reported exactly like a missing
    one, hiding its existence from the requester.
    """
    if task.owner_id == requesting_user_id:
        return
    get_json_logger("taskdesk.guard").warning(
        "guard denied",
        extra={
            "event": "guard_denied",
            "task_id": task.id,
            "user_id": requesting_user_id,
            "attributes": {"policy": policy},
        },
    )
    get_metrics().increment("guard_denials", {"policy": policy})
    if policy == "not_found":
        raise NotFoundError(task.id)
    raise ForbiddenError(task.id)


class OwnedTaskService:
    """Task operations on behalf of a requesting user.

    Every read or mutation of an existing task is authorized first; `create`
    stamps the requester as owner and `list` only ever sees the requester's tasks.
    """

    def __init__(self, store: TaskStore, *, policy: DenyPolicy = "forbidden") -> None:
        self.store = store
        self.policy: DenyPolicy = policy

    def _owned(self, user_id: str, task_id: int) -> Task:
        task = self.store.get(task_id)
        authorize(user_id, task, policy=self.policy)
        return task

    def create(self, user_id: str, description: str) -> Task:
        return self.store.create(description, validate_owner_id(user_id))

    def list(
        self, user_id: str, completed: bool | None = None, *, newest_first: bool = False
    ) -> list[Task]:
        return self.store.list_by_owner(
            validate_owner_id(user_id), completed, newest_first=newest_first
        )

    def get(self, user_id: str, task_id: int) -> Task:
        return self._owned(user_id, task_id)

    def update(self, user_id: str, task_id: int, description: str) -> Task:
        self._owned(user_id, task_id)
        return self.store.update(task_id, description)

    def toggle_completed(self, user_id: str, task_id: int) -> Task:
        self._owned(user_id, task_id)
        return self.store.toggle_completed(task_id)

    def delete(self, user_id: str, task_id: int) -> None:
        self._owned(user_id, task_id)
        self.store.delete(task_id)


__all__ = ["DenyPolicy", "OwnedTaskService", "authorize"]
