from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass
from typing import Any

import httpx


@dataclass
class ClientConfig:
    base_url: str
    user: str
    timeout: float = 10.0


class ClientError(Exception):
    """Gateway returned a non-success response."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class TaskClient:
    """Thin HTTP client for the taskdesk gateway."""

    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None) -> None:
        self._http = httpx.Client(
            base_url=cfg.base_url.rstrip("/"),
            headers={"X-User-Id": cfg.user},
            timeout=cfg.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._http.request(method, path, **kwargs)
        if resp.status_code >= 400:
            try:
                body = resp.json()
                detail = str(body.get("detail") or body)
            except ValueError:
                detail = resp.text
            raise ClientError(resp.status_code, detail)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def add(self, description: str) -> dict[str, Any]:
        return self._call("POST", "/tasks", json={"description": description})["task"]

    def list(self, completed: bool | None = None) -> list[dict[str, Any]]:
        params = {} if completed is None else {"completed": str(completed).lower()}
        return self._call("GET", "/tasks", params=params)["tasks"]

    def edit(self, task_id: int, description: str) -> dict[str, Any]:
        return self._call("PATCH", f"/tasks/{task_id}", json={"description": description})["task"]

    def toggle(self, task_id: int) -> dict[str, Any]:
        return self._call("POST", f"/tasks/{task_id}/toggle")["task"]

    def remove(self, task_id: int) -> None:
        self._call("DELETE", f"/tasks/{task_id}")


def _format_task(task: dict[str, Any]) -> str:
    mark = "x" if task.get("completed") else " "
    return f"[{mark}] {task.get('id'):>4}  {task.get('description', '')}"


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from taskdesk.config import load_config

    cfg = load_config()
    uvicorn.run(
        "taskdesk.gateway.asgi:app",
        host=args.host or cfg.host,
        port=args.port or cfg.port,
        log_config=None,
    )
    return 0


def _run_client(args: argparse.Namespace, transport: httpx.BaseTransport | None) -> int:
    client = TaskClient(ClientConfig(base_url=args.base_url, user=args.user), transport=transport)
    try:
        if args.cmd == "add":
            print(_format_task(client.add(args.description)))
        elif args.cmd == "list":
            completed = True if args.done else False if args.open else None
            tasks = client.list(completed)
            if args.json:
                print(json.dumps(tasks, separators=(",", ":")))
            else:
                for t in tasks:
                    print(_format_task(t))
        elif args.cmd == "edit":
            print(_format_task(client.edit(args.id, args.description)))
        elif args.cmd == "toggle":
            print(_format_task(client.toggle(args.id)))
        elif args.cmd == "rm":
            client.remove(args.id)
            print(f"deleted {args.id}")
        return 0
    except ClientError as exc:
        sys.stderr.write(f"error: {exc.detail} (HTTP {exc.status_code})\n")
        return 1
    except httpx.HTTPError as exc:
        sys.stderr.write(f"error: gateway unreachable at {args.base_url}: {exc}\n")
        return 1
    finally:
        client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("taskdesk")
    sub = parser.add_subparsers(dest="cmd")

    p_serve = sub.add_parser("serve", help="Run the HTTP gateway with uvicorn")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--base-url", default=os.getenv("TASKDESK_URL", "http://127.0.0.1:8000")
    )
    common.add_argument("--user", default=os.getenv("TASKDESK_USER") or os.getenv("USER") or "")

    p_add = sub.add_parser("add", parents=[common], help="Create a task")
    p_add.add_argument("description")

    p_list = sub.add_parser("list", parents=[common], help="List your tasks")
    state = p_list.add_mutually_exclusive_group()
    state.add_argument("--done", action="store_true", help="Only completed tasks")
    state.add_argument("--open", action="store_true", help="Only open tasks")
    p_list.add_argument("--json", action="store_true", help="Print raw JSON")

    p_edit = sub.add_parser("edit", parents=[common], help="Change a task's description")
    p_edit.add_argument("id", type=int)
    p_edit.add_argument("description")

    p_toggle = sub.add_parser("toggle", parents=[common], help="Flip a task's completion")
    p_toggle.add_argument("id", type=int)

    p_rm = sub.add_parser("rm", parents=[common], help="Delete a task")
    p_rm.add_argument("id", type=int)
    return parser


def main(argv: list[str] | None = None, *, transport: httpx.BaseTransport | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd is None:
        parser.print_help()
        return 2
    if args.cmd == "serve":
        return _serve(args)
    if not args.user.strip():
        sys.stderr.write("error: no user given; pass --user or set TASKDESK_USER\n")
        return 2
    return _run_client(args, transport)


if __name__ == "__main__":
    sys.exit(main())
