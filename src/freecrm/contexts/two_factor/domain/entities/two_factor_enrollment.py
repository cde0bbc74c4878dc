from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from freecrm.contexts.two_factor.domain.value_objects import EncryptedSecret
from freecrm.shared_kernel.primitives import UserId


class TwoFactorEnrollmentState(str, Enum):
    """
    TwoFactorEnrollmentState — lifecycle of one user's 2FA enrollment.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    """

    DISABLED = "disabled"
    PENDING_VERIFICATION = "pending_verification"
    ENABLED = "enabled"

    def can_transition_to(self, target: TwoFactorEnrollmentState) -> bool:
        """
        Check whether moving from this state to `target` is an allowed transition.

        Args:
            target: Desired next state.
        Returns:
            bool: `True` for `disabled->pending`, `pending->pending` (re-setup),
                `pending->enabled`, `pending->disabled` and `enabled->disabled`.
        Assumptions:
            Enabled enrollments are never reset in place; they must be disabled first.
        Raises:
            None.
        Side Effects:
            None.
        """
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[TwoFactorEnrollmentState, frozenset[TwoFactorEnrollmentState]] = {
    TwoFactorEnrollmentState.DISABLED: frozenset(
        {TwoFactorEnrollmentState.PENDING_VERIFICATION}
    ),
    TwoFactorEnrollmentState.PENDING_VERIFICATION: frozenset(
        {
            TwoFactorEnrollmentState.PENDING_VERIFICATION,
            TwoFactorEnrollmentState.ENABLED,
            TwoFactorEnrollmentState.DISABLED,
        }
    ),
    TwoFactorEnrollmentState.ENABLED: frozenset({TwoFactorEnrollmentState.DISABLED}),
}


@dataclass(frozen=True, slots=True)
class TwoFactorEnrollment:
    """
    TwoFactorEnrollment — immutable snapshot of a stored 2FA enrollment.

    A stored enrollment is either pending verification or enabled; disabling removes it.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/two_factor_repository.py
      - src/freecrm/contexts/two_factor/adapters/outbound/persistence/in_memory/
        two_factor_repository.py
    """

    user_id: UserId
    secret_enc: str
    backup_code_hashes: tuple[str, ...]
    state: TwoFactorEnrollmentState
    enabled_at: datetime | None
    updated_at: datetime

    def __post_init__(self) -> None:
        """
        Validate enrollment invariants for state, encrypted secret and UTC timestamps.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `updated_at` and `enabled_at` (when present) are timezone-aware UTC datetimes.
        Raises:
            ValueError: If encrypted secret is malformed, state is `DISABLED`,
                timestamps are non-UTC, or enabled invariants are violated.
        Side Effects:
            Normalizes `backup_code_hashes` to a tuple.
        """
        object.__setattr__(self, "backup_code_hashes", tuple(self.backup_code_hashes))
        if not self.secret_enc.strip():
            raise ValueError("TwoFactorEnrollment.secret_enc must be non-empty")
        EncryptedSecret.parse(self.secret_enc)
        if self.state is TwoFactorEnrollmentState.DISABLED:
            raise ValueError("TwoFactorEnrollment cannot be stored in disabled state")
        _ensure_utc_datetime(name="updated_at", value=self.updated_at)

        if self.state is TwoFactorEnrollmentState.ENABLED:
            if self.enabled_at is None:
                raise ValueError("TwoFactorEnrollment.enabled_at must be set when enabled")
            _ensure_utc_datetime(name="enabled_at", value=self.enabled_at)
            if self.updated_at < self.enabled_at:
                raise ValueError("TwoFactorEnrollment.updated_at cannot be before enabled_at")
            return
        if self.enabled_at is not None:
            raise ValueError("TwoFactorEnrollment.enabled_at must be None while pending")

    @property
    def enabled(self) -> bool:
        return self.state is TwoFactorEnrollmentState.ENABLED

    @property
    def remaining_backup_codes(self) -> int:
        return len(self.backup_code_hashes)


def _ensure_utc_datetime(*, name: str, value: datetime) -> None:
    """
    Validate timezone awareness and UTC offset for datetime fields.

    Args:
        name: Field name for deterministic error messages.
        value: Datetime value to validate.
    Returns:
        None.
    Assumptions:
        UTC datetimes are represented with timezone info and zero offset.
    Raises:
        ValueError: If datetime is naive or not in UTC.
    Side Effects:
        None.
    """
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None:
        raise ValueError(f"{name} must be timezone-aware UTC datetime")
    if offset.total_seconds() != 0:
        raise ValueError(f"{name} must be UTC datetime")
