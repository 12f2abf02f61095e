from __future__ import annotations

import datetime as _dt

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> _dt.datetime:
    return _dt.datetime.now(_dt.UTC)


class Task(BaseModel):
    """A single task owned by one user.

    - `id` is assigned by the store and never reused
    - instances are frozen; stores derive new versions with `model_copy(update=...)`
    - `updated_at` stays None until the first mutation
    """

    model_config = ConfigDict(frozen=True)

    id: int
    description: str
    owner_id: str
    completed: bool = False
    created_at: _dt.datetime = Field(default_factory=utc_now)
    updated_at: _dt.datetime | None = None

    @field_validator("description", "owner_id")
    @classmethod
    def _strip_non_blank(cls, value: str) -> str:
        v = value.strip()
        if not v:
            raise ValueError("must be non-empty")
        return v

    def touched(self, now: _dt.datetime | None = None) -> _dt.datetime:
        """Return a mutation timestamp that never precedes earlier ones."""
        ts = now or utc_now()
        floor = self.updated_at or self.created_at
        return ts if ts > floor else floor


__all__ = ["Task", "utc_now"]
