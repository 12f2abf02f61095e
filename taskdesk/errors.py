from __future__ import annotations


class TaskError(Exception):
    """Base class for task domain errors surfaced to callers."""

    code = "task_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskError):
    """Input fails domain rules (e.g. empty description)."""

    code = "validation_error"


class NotFoundError(TaskError):
    code = "not_found"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


class ForbiddenError(TaskError):
    code = "forbidden"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"task {task_id} belongs to another user")
        self.task_id = task_id


__all__ = ["TaskError", "ValidationError", "NotFoundError", "ForbiddenError"]
