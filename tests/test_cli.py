from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from taskdesk.cli import main


def _task(tid: int, description: str, completed: bool = False) -> dict[str, Any]:
    return {
        "id": tid,
        "description": description,
        "owner_id": "alice",
        "completed": completed,
        "created_at": "2030-01-01T00:00:00Z",
        "updated_at": None,
    }


class _Recorder:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.headers["X-User-Id"] == "alice"
        path = request.url.path
        if request.method == "POST" and path == "/tasks":
            body = json.loads(request.content)
            return httpx.Response(201, json={"task": _task(1, body["description"])})
        if request.method == "GET" and path == "/tasks":
            tasks = [_task(1, "Write report"), _task(2, "Buy milk", completed=True)]
            if request.url.params.get("completed") == "true":
                tasks = [t for t in tasks if t["completed"]]
            return httpx.Response(200, json={"tasks": tasks})
        if request.method == "POST" and path == "/tasks/2/toggle":
            return httpx.Response(200, json={"task": _task(2, "Buy milk", completed=False)})
        if request.method == "DELETE" and path == "/tasks/1":
            return httpx.Response(204)
        return httpx.Response(404, json={"error": "not_found", "detail": "task 9 not found"})


@pytest.fixture()
def recorder() -> _Recorder:
    return _Recorder()


def _run(argv: list[str], recorder: _Recorder) -> int:
    base = ["--base-url", "http://test", "--user", "alice"]
    return main([argv[0], *base, *argv[1:]], transport=httpx.MockTransport(recorder))


def test_add_prints_created_task(recorder: _Recorder, capsys: Any) -> None:
    assert _run(["add", "Write report"], recorder) == 0
    out = capsys.readouterr().out
    assert "[ ]" in out and "Write report" in out
    assert json.loads(recorder.requests[0].content) == {"description": "Write report"}


def test_list_done_filter_and_json(recorder: _Recorder, capsys: Any) -> None:
    assert _run(["list", "--done", "--json"], recorder) == 0
    tasks = json.loads(capsys.readouterr().out)
    assert [t["id"] for t in tasks] == [2]
    assert recorder.requests[0].url.params["completed"] == "true"


def test_list_plain(recorder: _Recorder, capsys: Any) -> None:
    assert _run(["list"], recorder) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("[x]")


def test_toggle_and_rm(recorder: _Recorder, capsys: Any) -> None:
    assert _run(["toggle", "2"], recorder) == 0
    assert _run(["rm", "1"], recorder) == 0
    out = capsys.readouterr().out
    assert "deleted 1" in out


def test_error_response_exits_nonzero(recorder: _Recorder, capsys: Any) -> None:
    assert _run(["edit", "9", "New text"], recorder) == 1
    err = capsys.readouterr().err
    assert "task 9 not found" in err
    assert "404" in err


def test_missing_user_is_rejected(monkeypatch: pytest.MonkeyPatch, capsys: Any) -> None:
    monkeypatch.delenv("TASKDESK_USER", raising=False)
    monkeypatch.delenv("USER", raising=False)
    assert main(["list", "--base-url", "http://test"]) == 2
    assert "no user" in capsys.readouterr().err
