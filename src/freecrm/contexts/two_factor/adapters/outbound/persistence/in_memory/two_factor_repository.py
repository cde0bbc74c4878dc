from __future__ import annotations

import threading
from datetime import datetime
from typing import Sequence

from freecrm.contexts.two_factor.application.ports.two_factor_repository import (
    TwoFactorRepository,
)
from freecrm.contexts.two_factor.domain.entities import (
    TwoFactorEnrollment,
    TwoFactorEnrollmentState,
)
from freecrm.shared_kernel.primitives import UserId


class InMemoryTwoFactorRepository(TwoFactorRepository):
    """
    InMemoryTwoFactorRepository — process-local 2FA enrollment storage guarded by one lock.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/two_factor_repository.py
      - apps/api/wiring/modules/two_factor.py
      - tests/unit/contexts/two_factor/adapters/outbound/persistence/test_in_memory_two_factor_repository.py
    """

    def __init__(self) -> None:
        """
        Initialize empty storage.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            One instance per process; rows are lost on restart.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._rows: dict[str, TwoFactorEnrollment] = {}
        self._lock = threading.Lock()

    def find_by_user_id(self, *, user_id: UserId) -> TwoFactorEnrollment | None:
        """
        Find enrollment by user identifier.

        Args:
            user_id: CRM user identifier.
        Returns:
            TwoFactorEnrollment | None: Stored snapshot or `None`.
        Assumptions:
            Dictionary key is the canonical string form of `UserId`.
        Raises:
            None.
        Side Effects:
            None.
        """
        with self._lock:
            return self._rows.get(str(user_id))

    def upsert_pending(
        self,
        *,
        user_id: UserId,
        secret_enc: str,
        backup_code_hashes: Sequence[str],
        updated_at: datetime,
    ) -> TwoFactorEnrollment:
        """
        Create or replace pending enrollment unless the stored row is already enabled.

        Args:
            user_id: CRM user identifier.
            secret_enc: Encrypted secret blob.
            backup_code_hashes: Backup-code digests.
            updated_at: UTC timestamp.
        Returns:
            TwoFactorEnrollment: Stored snapshot after the write; an enabled row is returned
                unchanged.
        Assumptions:
            Caller inspects `enabled` on the returned snapshot.
        Raises:
            ValueError: If snapshot violates entity invariants.
        Side Effects:
            Replaces the in-memory row for the user when it is absent or pending.
        """
        row = TwoFactorEnrollment(
            user_id=user_id,
            secret_enc=secret_enc,
            backup_code_hashes=tuple(backup_code_hashes),
            state=TwoFactorEnrollmentState.PENDING_VERIFICATION,
            enabled_at=None,
            updated_at=updated_at,
        )
        with self._lock:
            existing = self._rows.get(str(user_id))
            if existing is not None and not existing.state.can_transition_to(row.state):
                return existing
            self._rows[str(user_id)] = row
        return row

    def enable(
        self,
        *,
        user_id: UserId,
        expected_secret_enc: str,
        enabled_at: datetime,
        updated_at: datetime,
    ) -> TwoFactorEnrollment | None:
        """
        Promote pending enrollment to enabled if it still holds the verified secret.

        Args:
            user_id: CRM user identifier.
            expected_secret_enc: Encrypted secret the confirmation code was checked against.
            enabled_at: UTC timestamp of enablement.
            updated_at: UTC timestamp.
        Returns:
            TwoFactorEnrollment | None: Stored enabled snapshot, or `None` when the row is
                missing, no longer pending, or holds another secret.
        Assumptions:
            None.
        Raises:
            ValueError: If snapshot violates entity invariants.
        Side Effects:
            Replaces the in-memory row on success.
        """
        with self._lock:
            existing = self._rows.get(str(user_id))
            if existing is None:
                return None
            if not existing.state.can_transition_to(TwoFactorEnrollmentState.ENABLED):
                return None
            if existing.secret_enc != expected_secret_enc:
                return None
            row = TwoFactorEnrollment(
                user_id=user_id,
                secret_enc=existing.secret_enc,
                backup_code_hashes=existing.backup_code_hashes,
                state=TwoFactorEnrollmentState.ENABLED,
                enabled_at=enabled_at,
                updated_at=updated_at,
            )
            self._rows[str(user_id)] = row
            return row

    def replace_backup_code_hashes(
        self,
        *,
        user_id: UserId,
        expected_hashes: Sequence[str],
        new_hashes: Sequence[str],
        updated_at: datetime,
    ) -> bool:
        """
        Compare-and-set backup-code digests.

        Args:
            user_id: CRM user identifier.
            expected_hashes: Digests the caller observed.
            new_hashes: Digests to store.
            updated_at: UTC timestamp.
        Returns:
            bool: `True` if digests were swapped.
        Assumptions:
            Comparison is on the whole ordered sequence.
        Raises:
            None.
        Side Effects:
            Replaces the in-memory row on success.
        """
        with self._lock:
            existing = self._rows.get(str(user_id))
            if existing is None or existing.backup_code_hashes != tuple(expected_hashes):
                return False
            self._rows[str(user_id)] = TwoFactorEnrollment(
                user_id=user_id,
                secret_enc=existing.secret_enc,
                backup_code_hashes=tuple(new_hashes),
                state=existing.state,
                enabled_at=existing.enabled_at,
                updated_at=updated_at,
            )
            return True

    def delete(
        self,
        *,
        user_id: UserId,
        expected_state: TwoFactorEnrollmentState,
    ) -> bool:
        """
        Remove enrollment if it is still in the state the caller observed.

        Args:
            user_id: CRM user identifier.
            expected_state: State the caller read before deciding which proof to demand.
        Returns:
            bool: `True` if a row was removed.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            Deletes the in-memory row on success.
        """
        with self._lock:
            existing = self._rows.get(str(user_id))
            if existing is None or existing.state is not expected_state:
                return False
            if not existing.state.can_transition_to(TwoFactorEnrollmentState.DISABLED):
                return False
            del self._rows[str(user_id)]
            return True
