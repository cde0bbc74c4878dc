from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from freecrm.contexts.two_factor.adapters.outbound.persistence.in_memory import (
    InMemoryTwoFactorRepository,
)
from freecrm.contexts.two_factor.domain.entities import TwoFactorEnrollmentState
from freecrm.shared_kernel.primitives import UserId

_SECRET_ENC = f"{'0f' * 12}:{'a1' * 16}:{'42' * 32}"
_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
_USER_ID = UserId.from_string("00000000-0000-0000-0000-000000000401")
_HASHES = tuple(f"{index:064x}" for index in range(10))
_OTHER_SECRET_ENC = f"{'1e' * 12}:{'b2' * 16}:{'33' * 32}"
_PENDING = TwoFactorEnrollmentState.PENDING_VERIFICATION
_ENABLED = TwoFactorEnrollmentState.ENABLED


def _pending_repository() -> InMemoryTwoFactorRepository:
    repository = InMemoryTwoFactorRepository()
    repository.upsert_pending(
        user_id=_USER_ID,
        secret_enc=_SECRET_ENC,
        backup_code_hashes=_HASHES,
        updated_at=_NOW,
    )
    return repository


def test_repository_upsert_enable_and_delete_lifecycle() -> None:
    """
    Verify pending upsert, enable and delete keep stored snapshot consistent.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Enable keeps encrypted secret and digests of the pending row.
    Raises:
        AssertionError: If stored snapshots differ from expected values.
    Side Effects:
        None.
    """
    repository = _pending_repository()

    pending = repository.find_by_user_id(user_id=_USER_ID)
    assert pending is not None
    assert pending.state is TwoFactorEnrollmentState.PENDING_VERIFICATION
    assert pending.enabled_at is None

    enabled_at = _NOW + timedelta(minutes=1)
    enabled = repository.enable(
        user_id=_USER_ID,
        expected_secret_enc=_SECRET_ENC,
        enabled_at=enabled_at,
        updated_at=enabled_at,
    )
    assert enabled is not None
    assert enabled.enabled is True
    assert enabled.secret_enc == _SECRET_ENC
    assert enabled.backup_code_hashes == _HASHES
    assert repository.find_by_user_id(user_id=_USER_ID) == enabled

    assert repository.delete(user_id=_USER_ID, expected_state=_ENABLED) is True
    assert repository.find_by_user_id(user_id=_USER_ID) is None
    assert repository.delete(user_id=_USER_ID, expected_state=_ENABLED) is False


def test_repository_upsert_pending_replaces_previous_row() -> None:
    repository = _pending_repository()

    repository.upsert_pending(
        user_id=_USER_ID,
        secret_enc=_OTHER_SECRET_ENC,
        backup_code_hashes=_HASHES[:5],
        updated_at=_NOW + timedelta(seconds=5),
    )

    stored = repository.find_by_user_id(user_id=_USER_ID)
    assert stored is not None
    assert stored.secret_enc == _OTHER_SECRET_ENC
    assert stored.remaining_backup_codes == 5


def _enabled_repository() -> InMemoryTwoFactorRepository:
    repository = _pending_repository()
    enabled = repository.enable(
        user_id=_USER_ID,
        expected_secret_enc=_SECRET_ENC,
        enabled_at=_NOW,
        updated_at=_NOW,
    )
    assert enabled is not None
    return repository


def test_repository_upsert_pending_never_resets_enabled_row() -> None:
    """
    Verify pending upsert leaves an enabled row untouched and returns it.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        ENABLED -> PENDING_VERIFICATION is not an allowed transition.
    Raises:
        AssertionError: If enabled row is replaced.
    Side Effects:
        None.
    """
    repository = _enabled_repository()

    upserted = repository.upsert_pending(
        user_id=_USER_ID,
        secret_enc=_OTHER_SECRET_ENC,
        backup_code_hashes=_HASHES[:3],
        updated_at=_NOW + timedelta(minutes=5),
    )

    assert upserted.enabled is True
    assert upserted.secret_enc == _SECRET_ENC
    assert repository.find_by_user_id(user_id=_USER_ID) == upserted


def test_repository_enable_is_compare_and_set_on_pending_secret() -> None:
    repository = _pending_repository()
    repository.upsert_pending(
        user_id=_USER_ID,
        secret_enc=_OTHER_SECRET_ENC,
        backup_code_hashes=_HASHES,
        updated_at=_NOW + timedelta(seconds=1),
    )

    assert repository.enable(
        user_id=_USER_ID,
        expected_secret_enc=_SECRET_ENC,
        enabled_at=_NOW + timedelta(seconds=2),
        updated_at=_NOW + timedelta(seconds=2),
    ) is None
    stored = repository.find_by_user_id(user_id=_USER_ID)
    assert stored is not None
    assert stored.state is _PENDING
    assert stored.secret_enc == _OTHER_SECRET_ENC


@pytest.mark.parametrize("enabled_first", [False, True])
def test_repository_enable_refuses_missing_or_enabled_row(enabled_first: bool) -> None:
    repository = _enabled_repository() if enabled_first else InMemoryTwoFactorRepository()
    before = repository.find_by_user_id(user_id=_USER_ID)

    assert repository.enable(
        user_id=_USER_ID,
        expected_secret_enc=_SECRET_ENC,
        enabled_at=_NOW + timedelta(minutes=1),
        updated_at=_NOW + timedelta(minutes=1),
    ) is None
    assert repository.find_by_user_id(user_id=_USER_ID) == before


def test_repository_delete_is_conditional_on_observed_state() -> None:
    """
    Verify delete refuses a row whose state changed since the caller read it.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Caller passes the state it based its proof decision on.
    Raises:
        AssertionError: If a changed row is deleted.
    Side Effects:
        None.
    """
    repository = _enabled_repository()

    assert repository.delete(user_id=_USER_ID, expected_state=_PENDING) is False
    assert repository.find_by_user_id(user_id=_USER_ID) is not None

    assert repository.delete(user_id=_USER_ID, expected_state=_ENABLED) is True
    assert repository.find_by_user_id(user_id=_USER_ID) is None


def test_repository_replace_backup_code_hashes_is_compare_and_set() -> None:
    repository = _pending_repository()

    assert repository.replace_backup_code_hashes(
        user_id=_USER_ID,
        expected_hashes=_HASHES[1:],
        new_hashes=_HASHES[2:],
        updated_at=_NOW,
    ) is False
    assert repository.replace_backup_code_hashes(
        user_id=_USER_ID,
        expected_hashes=list(_HASHES),
        new_hashes=_HASHES[1:],
        updated_at=_NOW + timedelta(seconds=1),
    ) is True

    stored = repository.find_by_user_id(user_id=_USER_ID)
    assert stored is not None
    assert stored.backup_code_hashes == _HASHES[1:]
    assert stored.updated_at == _NOW + timedelta(seconds=1)
    assert repository.replace_backup_code_hashes(
        user_id=UserId.from_string("00000000-0000-0000-0000-000000000402"),
        expected_hashes=(),
        new_hashes=(),
        updated_at=_NOW,
    ) is False


def test_repository_concurrent_compare_and_set_has_single_winner() -> None:
    """
    Verify racing swaps from the same observed digests succeed exactly once.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Repository lock serializes compare and write.
    Raises:
        AssertionError: If more or fewer than one swap succeeds.
    Side Effects:
        Starts short-lived threads.
    """
    repository = _pending_repository()
    barrier = threading.Barrier(8)
    outcomes: list[bool] = []
    outcomes_lock = threading.Lock()

    def _swap(index: int) -> None:
        barrier.wait()
        swapped = repository.replace_backup_code_hashes(
            user_id=_USER_ID,
            expected_hashes=_HASHES,
            new_hashes=_HASHES[: index % 9],
            updated_at=_NOW,
        )
        with outcomes_lock:
            outcomes.append(swapped)

    threads = [threading.Thread(target=_swap, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count(True) == 1
    assert outcomes.count(False) == 7
