from __future__ import annotations

from taskdesk.config import build_store, load_config
from taskdesk.guard import OwnedTaskService

from .app import create_app

_cfg = load_config()
app = create_app(OwnedTaskService(build_store(_cfg), policy=_cfg.deny_policy))
