from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from freecrm.shared_kernel.primitives import UserId


def test_user_id_from_string_normalizes_case_and_whitespace() -> None:
    """
    Verify UserId parses a canonical UUID in any case and renders it lowercase.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        UUID string is valid.
    Raises:
        AssertionError: If parsing or rendering differs.
    Side Effects:
        None.
    """
    raw = str(uuid4())

    user_id = UserId.from_string(f"  {raw.upper()} ")

    assert str(user_id) == raw
    assert user_id == UserId(UUID(raw))


@pytest.mark.parametrize(
    "raw",
    [
        " ",
        "not-a-uuid",
        "{00000000-0000-0000-0000-000000000001}",
        "urn:uuid:00000000-0000-0000-0000-000000000001",
        "00000000000000000000000000000001",
    ],
)
def test_user_id_from_string_rejects_non_canonical_values(raw: str) -> None:
    with pytest.raises(ValueError):
        UserId.from_string(raw)


def test_user_id_requires_uuid_value() -> None:
    with pytest.raises(ValueError, match="UUID value"):
        UserId("00000000-0000-0000-0000-000000000001")  # type: ignore[arg-type]
