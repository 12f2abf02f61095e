from __future__ import annotations

import html
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, Literal

import redis
from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from taskdesk.errors import ForbiddenError, NotFoundError, TaskError, ValidationError
from taskdesk.guard import OwnedTaskService
from taskdesk.models.task import Task
from taskdesk.observability import (
    configure_uvicorn_logging,
    get_json_logger,
    get_metrics,
    use_request_context,
)

_STATUS_BY_ERROR: dict[type[TaskError], int] = {
    ValidationError: 400,
    ForbiddenError: 403,
    NotFoundError: 404,
}


class CreateTaskRequest(BaseModel):
    description: str


class UpdateTaskRequest(BaseModel):
    description: str


def _serialize_task(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json")


def _render_html(user_id: str, tasks: list[Task]) -> str:
    rows = []
    for t in tasks:
        css = "done" if t.completed else "open"
        rows.append(
            f'<li class="{css}" data-id="{t.id}">'
            f'<input type="checkbox" disabled{" checked" if t.completed else ""}> '
            f"{html.escape(t.description)}</li>"
        )
    body = "\n".join(rows) or "<li class=\"empty\">No tasks yet.</li>"
    return (
        "<!doctype html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>Tasks for {html.escape(user_id)}</title></head>\n"
        f"<body><h1>Tasks for {html.escape(user_id)}</h1>\n<ul>\n{body}\n</ul></body></html>\n"
    )


def require_user(x_user_id: str | None = Header(default=None)) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="missing X-User-Id header")
    return user_id


def create_app(service: OwnedTaskService) -> FastAPI:
    app = FastAPI(title="taskdesk")
    # Configure uvicorn logging at app creation to avoid import-time side effects
    configure_uvicorn_logging()
    logger = get_json_logger("taskdesk.gateway")
    metrics = get_metrics()

    @app.middleware("http")
    async def _request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        user_id = (request.headers.get("X-User-Id") or "").strip() or None
        with use_request_context(request_id, user_id):
            response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    @app.exception_handler(TaskError)
    async def _task_error(request: Request, exc: TaskError) -> JSONResponse:
        status = _STATUS_BY_ERROR.get(type(exc), 400)
        logger.info(
            "gateway task error",
            extra={
                "event": "gateway_error",
                "path": request.url.path,
                "status": status,
                "attributes": {"code": exc.code},
            },
        )
        metrics.increment("gateway_errors", {"code": exc.code})
        return JSONResponse(status_code=status, content={"error": exc.code, "detail": exc.message})

    @app.exception_handler(redis.exceptions.RedisError)
    async def _store_error(request: Request, exc: redis.exceptions.RedisError) -> JSONResponse:
        logger.error(
            "gateway store error",
            extra={
                "event": "gateway_error",
                "path": request.url.path,
                "status": 503,
                "attributes": {"error": str(exc)[:200]},
            },
        )
        metrics.increment("gateway_errors", {"code": "store_unavailable"})
        return JSONResponse(
            status_code=503,
            content={"error": "store_unavailable", "detail": "task store unavailable"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/ready")
    def ready() -> dict[str, str]:
        if not service.store.ping():
            logger.error(
                "gateway not ready",
                extra={"event": "gateway_error", "path": "/ready", "status": 503},
            )
            metrics.increment("gateway_ready_errors", {})
            raise HTTPException(status_code=503, detail="store not ready")
        return {"status": "ok"}

    @app.post("/tasks", status_code=201)
    def create_task(
        body: CreateTaskRequest, user_id: str = Depends(require_user)
    ) -> dict[str, Any]:
        task = service.create(user_id, body.description)
        return {"task": _serialize_task(task)}

    @app.get("/tasks")
    def list_tasks(
        completed: bool | None = None,
        order: Literal["oldest", "newest"] = "oldest",
        user_id: str = Depends(require_user),
    ) -> dict[str, Any]:
        tasks = service.list(user_id, completed, newest_first=order == "newest")
        return {"tasks": [_serialize_task(t) for t in tasks]}

    @app.get("/tasks.html", response_class=HTMLResponse)
    def list_tasks_html(
        completed: bool | None = None,
        order: Literal["oldest", "newest"] = "oldest",
        user_id: str = Depends(require_user),
    ) -> HTMLResponse:
        tasks = service.list(user_id, completed, newest_first=order == "newest")
        return HTMLResponse(_render_html(user_id, tasks))

    @app.get("/tasks/{task_id}")
    def get_task(task_id: int, user_id: str = Depends(require_user)) -> dict[str, Any]:
        return {"task": _serialize_task(service.get(user_id, task_id))}

    @app.patch("/tasks/{task_id}")
    def update_task(
        task_id: int, body: UpdateTaskRequest, user_id: str = Depends(require_user)
    ) -> dict[str, Any]:
        return {"task": _serialize_task(service.update(user_id, task_id, body.description))}

    @app.post("/tasks/{task_id}/toggle")
    def toggle_task(task_id: int, user_id: str = Depends(require_user)) -> dict[str, Any]:
        return {"task": _serialize_task(service.toggle_completed(user_id, task_id))}

    @app.delete("/tasks/{task_id}", status_code=204)
    def delete_task(task_id: int, user_id: str = Depends(require_user)) -> Response:
        service.delete(user_id, task_id)
        return Response(status_code=204)

    return app


__all__ = ["create_app", "require_user"]
