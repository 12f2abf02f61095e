from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Literal

from taskdesk.guard import DenyPolicy
from taskdesk.store import InMemoryTaskStore, RedisTaskStore, TaskStore

StoreKind = Literal["memory", "redis"]


@dataclass(slots=True)
class AppConfig:
    store: StoreKind
    redis_url: str
    key_prefix: str
    deny_policy: DenyPolicy
    host: str
    port: int


def _read_choice(raw: str | None, allowed: tuple[str, ...], default: str) -> str:
    value = (raw or "").strip().lower()
    return value if value in allowed else default


def load_config(env: dict[str, str] | None = None) -> AppConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    port_raw = (e.get("TASKDESK_PORT") or "").strip()
    try:
        port = int(port_raw) if port_raw else 8000
    except ValueError:
        port = 8000
    store = _read_choice(e.get("TASKDESK_STORE"), ("memory", "redis"), "memory")
    policy = _read_choice(
        e.get("TASKDESK_DENY_POLICY"), ("forbidden", "not_found"), "forbidden"
    )
    return AppConfig(
        store=store,  # type: ignore[arg-type]
        redis_url=e.get("REDIS_URL") or "redis://localhost:6379/0",
        key_prefix=(e.get("TASKDESK_KEY_PREFIX") or "taskdesk").strip() or "taskdesk",
        deny_policy=policy,  # type: ignore[arg-type]
        host=(e.get("TASKDESK_HOST") or "127.0.0.1").strip(),
        port=port if 0 < port < 65536 else 8000,
    )


def build_store(cfg: AppConfig) -> TaskStore:
    if cfg.store == "redis":
        return RedisTaskStore(url=cfg.redis_url, key_prefix=cfg.key_prefix)
    return InMemoryTaskStore()


__all__ = ["AppConfig", "DenyPolicy", "build_store", "load_config"]
