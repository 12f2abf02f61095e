from __future__ import annotations

import pytest

from taskdesk.errors import ValidationError
from taskdesk.store.validation import (
    MAX_DESCRIPTION_LENGTH,
    validate_for_create,
    validate_for_update,
    validate_owner_id,
)


def test_create_returns_trimmed_description() -> None:
    assert validate_for_create("  Buy milk \n", "alice") == "Buy milk"


@pytest.mark.parametrize(
    "description,owner,err",
    [
        ("", "alice", "description"),
        ("   ", "alice", "description"),
        ("\t\n", "alice", "description"),
        (None, "alice", "description"),
        (42, "alice", "description"),
        ("Buy milk", None, "owner_id"),
        ("Buy milk", "", "owner_id"),
        ("Buy milk", "  ", "owner_id"),
    ],
)
def test_create_rejects_bad_input(description: object, owner: object, err: str) -> None:
    with pytest.raises(ValidationError) as ei:
        validate_for_create(description, owner)
    assert err in str(ei.value)


def test_update_uses_same_description_rules() -> None:
    assert validate_for_update(" Write report ") == "Write report"
    with pytest.raises(ValidationError):
        validate_for_update("    ")


def test_description_length_cap() -> None:
    assert validate_for_update("x" * MAX_DESCRIPTION_LENGTH)
    with pytest.raises(ValidationError) as ei:
        validate_for_update("x" * (MAX_DESCRIPTION_LENGTH + 1))
    assert "at most" in ei.value.message


def test_owner_id_is_trimmed() -> None:
    assert validate_owner_id(" bob ") == "bob"
