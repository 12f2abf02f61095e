from __future__ import annotations

import threading

from taskdesk.errors import NotFoundError
from taskdesk.models.task import Task
from taskdesk.observability import get_json_logger, get_metrics

from .interface import TaskStore
from .validation import validate_for_create, validate_for_update, validate_owner_id


class InMemoryTaskStore(TaskStore):
    """Process-local task store.

    - Ids come from a monotonic counter and are never reused
    - One lock serialises every read-modify-write, so no partial update is visible
    - Tasks are frozen, so handing out stored instances is safe
    """

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._logger = get_json_logger("taskdesk.store")
        self._metrics = get_metrics()

    def _record(self, op: str, task: Task) -> None:
        self._logger.info(
            f"task {op}",
            extra={
                "event": f"task_{op}",
                "op": op,
                "task_id": task.id,
                "attributes": {"owner_id": task.owner_id, "store": "memory"},
            },
        )
        self._metrics.increment("task_ops", {"op": op, "store": "memory"})

    def _require(self, task_id: int) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    def create(self, description: str, owner_id: str) -> Task:
        desc = validate_for_create(description, owner_id)
        owner = validate_owner_id(owner_id)
        with self._lock:
            task = Task(id=self._next_id, description=desc, owner_id=owner)
            self._next_id += 1
            self._tasks[task.id] = task
        self._record("created", task)
        return task

    def get(self, task_id: int) -> Task:
        with self._lock:
            return self._require(task_id)

    def list_by_owner(
        self,
        owner_id: str,
        completed: bool | None = None,
        *,
        newest_first: bool = False,
    ) -> list[Task]:
        with self._lock:
            # dicts keep insertion order, which matches id order here
            tasks = [
                t
                for t in self._tasks.values()
                if t.owner_id == owner_id and (completed is None or t.completed == completed)
            ]
        if newest_first:
            tasks.reverse()
        return tasks

    def update(self, task_id: int, description: str) -> Task:
        desc = validate_for_update(description)
        with self._lock:
            current = self._require(task_id)
            updated = current.model_copy(
                update={"description": desc, "updated_at": current.touched()}
            )
            self._tasks[task_id] = updated
        self._record("updated", updated)
        return updated

    def toggle_completed(self, task_id: int) -> Task:
        with self._lock:
            current = self._require(task_id)
            updated = current.model_copy(
                update={"completed": not current.completed, "updated_at": current.touched()}
            )
            self._tasks[task_id] = updated
        self._record("toggled", updated)
        return updated

    def delete(self, task_id: int) -> None:
        with self._lock:
            task = self._tasks.pop(task_id, None)
        if task is None:
            raise NotFoundError(task_id)
        self._record("deleted", task)

    def ping(self) -> bool:
        return True


__all__ = ["InMemoryTaskStore"]
