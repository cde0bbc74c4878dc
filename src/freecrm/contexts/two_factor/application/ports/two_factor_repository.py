from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from freecrm.contexts.two_factor.domain.entities import (
    TwoFactorEnrollment,
    TwoFactorEnrollmentState,
)
from freecrm.shared_kernel.primitives import UserId


class TwoFactorRepository(Protocol):
    """
    TwoFactorRepository — storage port for 2FA enrollments.

    Every method is one atomic write or read. Lifecycle writes are conditional on the state
    the caller observed, and backup-code consumption is a compare-and-set so concurrent
    consumers cannot spend the same code twice.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/domain/entities/two_factor_enrollment.py
      - src/freecrm/contexts/two_factor/adapters/outbound/persistence/in_memory/
        two_factor_repository.py
    """

    def find_by_user_id(self, *, user_id: UserId) -> TwoFactorEnrollment | None:
        """
        Find enrollment by user identifier.

        Args:
            user_id: CRM user identifier.
        Returns:
            TwoFactorEnrollment | None: Stored snapshot or `None` when 2FA is disabled.
        Assumptions:
            `user_id` identifies at most one enrollment.
        Raises:
            ValueError: If adapter cannot map stored data to the entity.
        Side Effects:
            Reads one storage record.
        """
        ...

    def upsert_pending(
        self,
        *,
        user_id: UserId,
        secret_enc: str,
        backup_code_hashes: Sequence[str],
        updated_at: datetime,
    ) -> TwoFactorEnrollment:
        """
        Create or replace a pending enrollment in one write that never touches an enabled row.

        Args:
            user_id: CRM user identifier.
            secret_enc: Encrypted secret blob.
            backup_code_hashes: Digests of the freshly generated backup codes.
            updated_at: UTC timestamp of this write.
        Returns:
            TwoFactorEnrollment: Stored snapshot after the write. When the row is already
                enabled it is returned unchanged.
        Assumptions:
            Caller raises `TwoFactorAlreadyEnabledError` when the returned snapshot is enabled.
        Raises:
            ValueError: If resulting state violates entity invariants.
        Side Effects:
            Writes one storage record when the stored row is absent or pending.
        """
        ...

    def enable(
        self,
        *,
        user_id: UserId,
        expected_secret_enc: str,
        enabled_at: datetime,
        updated_at: datetime,
    ) -> TwoFactorEnrollment | None:
        """
        Compare-and-set a pending enrollment holding `expected_secret_enc` to enabled.

        Args:
            user_id: CRM user identifier.
            expected_secret_enc: Encrypted secret the confirmation code was verified against.
            enabled_at: UTC timestamp of enablement.
            updated_at: UTC timestamp of this write.
        Returns:
            TwoFactorEnrollment | None: Stored enabled snapshot, or `None` when the row is
                missing, not pending, or was re-enrolled with another secret meanwhile.
        Assumptions:
            Only PENDING_VERIFICATION may transition to ENABLED.
        Raises:
            ValueError: If resulting state violates entity invariants.
        Side Effects:
            Writes one storage record on success.
        """
        ...

    def replace_backup_code_hashes(
        self,
        *,
        user_id: UserId,
        expected_hashes: Sequence[str],
        new_hashes: Sequence[str],
        updated_at: datetime,
    ) -> bool:
        """
        Atomically swap stored backup-code digests if they still equal `expected_hashes`.

        Args:
            user_id: CRM user identifier.
            expected_hashes: Digests the caller read before deciding.
            new_hashes: Digests to store.
            updated_at: UTC timestamp of this write.
        Returns:
            bool: `True` when the swap happened, `False` when stored digests changed meanwhile
                or the enrollment no longer exists.
        Assumptions:
            Used for backup-code consumption and regeneration.
        Raises:
            None.
        Side Effects:
            Writes one storage record on success.
        """
        ...

    def delete(
        self,
        *,
        user_id: UserId,
        expected_state: TwoFactorEnrollmentState,
    ) -> bool:
        """
        Remove enrollment if it is still in `expected_state`, returning the user to disabled.

        Args:
            user_id: CRM user identifier.
            expected_state: State observed when the caller decided which proof to demand.
        Returns:
            bool: `True` if an enrollment was removed, `False` when it is gone or its state
                changed meanwhile.
        Assumptions:
            Caller has verified a fresh second factor when `expected_state` is ENABLED.
        Raises:
            None.
        Side Effects:
            Deletes one storage record on success.
        """
        ...
