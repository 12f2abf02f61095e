from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any, cast

import redis

from taskdesk.errors import NotFoundError
from taskdesk.models.task import Task
from taskdesk.observability import get_json_logger, get_metrics

from .interface import TaskStore
from .validation import validate_for_create, validate_for_update, validate_owner_id


class RedisTaskStore(TaskStore):
    """Redis-backed task store.

    Data structures:
    - Counter `{prefix}:seq` assigns ids via INCR, so ids are never reused
    - Hash per task: key `{prefix}:task:{id}` with field `json`
    - Sorted set per owner for insertion ordering:
      key `{prefix}:owner:{owner_id}` with score=id, member=id

    Mutations run as WATCH/MULTI transactions on the task key and are retried
    by redis-py when another writer gets there first.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        key_prefix: str = "taskdesk",
        client: Any | None = None,
    ) -> None:
        if client is not None:
            self._redis = client
        else:
            url = url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
            # decode_responses=True returns str everywhere for easier JSON handling
            self._redis = redis.Redis.from_url(url, decode_responses=True)
        self._prefix = key_prefix.rstrip(":")
        self._logger = get_json_logger("taskdesk.store")
        self._metrics = get_metrics()

    # key helpers
    def _seq_key(self) -> str:
        return f"{self._prefix}:seq"

    def _task_key(self, task_id: int) -> str:
        return f"{self._prefix}:task:{task_id}"

    def _owner_key(self, owner_id: str) -> str:
        return f"{self._prefix}:owner:{owner_id}"

    def _record(self, op: str, task: Task) -> None:
        self._logger.info(
            f"task {op}",
            extra={
                "event": f"task_{op}",
                "op": op,
                "task_id": task.id,
                "attributes": {"owner_id": task.owner_id, "store": "redis"},
            },
        )
        self._metrics.increment("task_ops", {"op": op, "store": "redis"})

    def create(self, description: str, owner_id: str) -> Task:
        desc = validate_for_create(description, owner_id)
        owner = validate_owner_id(owner_id)
        task_id = int(self._redis.incr(self._seq_key()))
        task = Task(id=task_id, description=desc, owner_id=owner)
        p = self._redis.pipeline(transaction=True)
        p.hset(self._task_key(task.id), mapping={"json": task.model_dump_json()})
        p.zadd(self._owner_key(owner), {str(task.id): task.id})
        p.execute()
        self._record("created", task)
        return task

    def get(self, task_id: int) -> Task:
        raw = cast(str | None, self._redis.hget(self._task_key(task_id), "json"))
        if raw is None:
            raise NotFoundError(task_id)
        return Task.model_validate_json(raw)

    def list_by_owner(
        self,
        owner_id: str,
        completed: bool | None = None,
        *,
        newest_first: bool = False,
    ) -> list[Task]:
        key = self._owner_key(owner_id)
        if newest_first:
            ids = cast(list[str], self._redis.zrevrange(key, 0, -1))
        else:
            ids = cast(list[str], self._redis.zrange(key, 0, -1))
        if not ids:
            return []
        p = self._redis.pipeline(transaction=False)
        for tid in ids:
            p.hget(self._task_key(int(tid)), "json")
        result: list[Task] = []
        for raw in p.execute():
            # ids may outlive their hash briefly while a delete is in flight
            if raw is None:
                continue
            t = Task.model_validate_json(raw)
            if completed is None or t.completed == completed:
                result.append(t)
        return result

    def _mutate(self, task_id: int, change: Callable[[Task], Task]) -> Task:
        key = self._task_key(task_id)
        holder: dict[str, Task] = {}

        def _txn(pipe: Any) -> None:
            raw = pipe.hget(key, "json")
            if raw is None:
                raise NotFoundError(task_id)
            updated = change(Task.model_validate_json(raw))
            pipe.multi()
            pipe.hset(key, mapping={"json": updated.model_dump_json()})
            holder["task"] = updated

        self._redis.transaction(_txn, key)
        return holder["task"]

    def update(self, task_id: int, description: str) -> Task:
        desc = validate_for_update(description)
        task = self._mutate(
            task_id,
            lambda cur: cur.model_copy(update={"description": desc, "updated_at": cur.touched()}),
        )
        self._record("updated", task)
        return task

    def toggle_completed(self, task_id: int) -> Task:
        task = self._mutate(
            task_id,
            lambda cur: cur.model_copy(
                update={"completed": not cur.completed, "updated_at": cur.touched()}
            ),
        )
        self._record("toggled", task)
        return task

    def delete(self, task_id: int) -> None:
        key = self._task_key(task_id)
        holder: dict[str, Task] = {}

        def _txn(pipe: Any) -> None:
            raw = pipe.hget(key, "json")
            if raw is None:
                raise NotFoundError(task_id)
            task = Task.model_validate_json(raw)
            pipe.multi()
            pipe.delete(key)
            pipe.zrem(self._owner_key(task.owner_id), str(task_id))
            holder["task"] = task

        self._redis.transaction(_txn, key)
        self._record("deleted", holder["task"])

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except redis.exceptions.RedisError:
            return False


__all__ = ["RedisTaskStore"]
