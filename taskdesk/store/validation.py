from __future__ import annotations

from typing import Any

from taskdesk.errors import ValidationError

MAX_DESCRIPTION_LENGTH = 1000


def _require_str_non_empty(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    v = value.strip()
    if not v:
        raise ValidationError(f"{name} must be non-empty")
    return v


def _check_description(description: Any) -> str:
    desc = _require_str_non_empty("description", description)
    if len(desc) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )
    return desc


def validate_owner_id(owner_id: Any) -> str:
    if owner_id is None:
        raise ValidationError("owner_id is required")
    return _require_str_non_empty("owner_id", owner_id)


def validate_for_create(description: Any, owner_id: Any) -> str:
    """Check a new task's fields and return the trimmed description."""
    desc = _check_description(description)
    validate_owner_id(owner_id)
    return desc


def validate_for_update(description: Any) -> str:
    return _check_description(description)


__all__ = [
    "MAX_DESCRIPTION_LENGTH",
    "validate_for_create",
    "validate_for_update",
    "validate_owner_id",
]
