from __future__ import annotations

from dataclasses import dataclass

from freecrm.contexts.two_factor.application.ports import TwoFactorRepository
from freecrm.contexts.two_factor.application.use_cases.two_factor_errors import (
    TwoFactorNotEnabledError,
)
from freecrm.contexts.two_factor.domain.value_objects import BACKUP_CODE_COUNT
from freecrm.shared_kernel.primitives import UserId

_DEFAULT_WARNING_THRESHOLD = 3


@dataclass(frozen=True, slots=True)
class BackupCodesStatus:
    """
    BackupCodesStatus — how many backup codes are left and whether to regenerate.
    """

    remaining: int
    total: int
    warning_threshold: int
    needs_regeneration: bool


class GetBackupCodesStatusUseCase:
    """
    GetBackupCodesStatusUseCase — report remaining backup codes for an enabled user.

    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/regenerate_backup_codes.py
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorRepository,
        warning_threshold: int = _DEFAULT_WARNING_THRESHOLD,
    ) -> None:
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("GetBackupCodesStatusUseCase requires repository")
        if warning_threshold < 0 or warning_threshold > BACKUP_CODE_COUNT:
            raise ValueError(
                f"GetBackupCodesStatusUseCase warning_threshold must be in [0, {BACKUP_CODE_COUNT}]"
            )
        self._repository = repository
        self._warning_threshold = warning_threshold

    def status(self, *, user_id: UserId) -> BackupCodesStatus:
        """
        Read backup-code counters.

        Args:
            user_id: Authenticated user id.
        Returns:
            BackupCodesStatus: Remaining/total counts and regeneration hint.
        Assumptions:
            `needs_regeneration` is true at or below the warning threshold.
        Raises:
            TwoFactorNotEnabledError: If 2FA is not enabled.
        Side Effects:
            Reads one storage record.
        """
        enrollment = self._repository.find_by_user_id(user_id=user_id)
        if enrollment is None or not enrollment.enabled:
            raise TwoFactorNotEnabledError()

        remaining = enrollment.remaining_backup_codes
        return BackupCodesStatus(
            remaining=remaining,
            total=BACKUP_CODE_COUNT,
            warning_threshold=self._warning_threshold,
            needs_regeneration=remaining <= self._warning_threshold,
        )
