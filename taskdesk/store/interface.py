from __future__ import annotations

from typing import Protocol

from taskdesk.models.task import Task


class TaskStore(Protocol):
    """Authoritative CRUD over tasks keyed by id.

    Implementations raise `NotFoundError` for unknown ids and `ValidationError`
    for bad input; they never return None in place of a task.
    """

    def create(self, description: str, owner_id: str) -> Task:
        """Validate, assign a fresh id and insert a new task."""

    def get(self, task_id: int) -> Task:
        """Return the task or raise NotFoundError."""

    def list_by_owner(
        self,
        owner_id: str,
        completed: bool | None = None,
        *,
        newest_first: bool = False,
    ) -> list[Task]:
        """Snapshot of the owner's tasks in insertion order (or reversed)."""

    def update(self, task_id: int, description: str) -> Task:
        """Replace the description of an existing task."""

    def toggle_completed(self, task_id: int) -> Task:
        """Flip the completion flag of an existing task."""

    def delete(self, task_id: int) -> None:
        """Remove a task permanently."""

    def ping(self) -> bool:
        """Report whether the backing storage is reachable."""


__all__ = ["TaskStore"]
