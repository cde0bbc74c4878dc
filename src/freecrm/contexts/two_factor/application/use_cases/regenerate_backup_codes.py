from __future__ import annotations

import logging
from dataclasses import dataclass

from freecrm.contexts.two_factor.application.ports import (
    BackupCodeManager,
    TwoFactorClock,
    TwoFactorRepository,
)
from freecrm.contexts.two_factor.application.use_cases.second_factor_proof import (
    SecondFactorProofVerifier,
)
from freecrm.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)

_MAX_REPLACE_ATTEMPTS = 3


@dataclass(frozen=True, slots=True)
class RegenerateBackupCodesResult:
    """
    RegenerateBackupCodesResult — fresh plaintext backup codes, shown once.
    """

    backup_codes: tuple[str, ...]

    def __repr__(self) -> str:
        return f"RegenerateBackupCodesResult(backup_codes={len(self.backup_codes)})"


class RegenerateBackupCodesUseCase:
    """
    RegenerateBackupCodesUseCase — replace all backup codes after a TOTP check.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/backup_code_manager.py
      - src/freecrm/contexts/two_factor/application/use_cases/get_backup_codes_status.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorRepository,
        backup_codes: BackupCodeManager,
        proof_verifier: SecondFactorProofVerifier,
        clock: TwoFactorClock,
    ) -> None:
        """
        Initialize regeneration dependencies.

        Args:
            repository: Enrollment persistence port.
            backup_codes: Backup-code generator.
            proof_verifier: TOTP checker.
            clock: UTC time source.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If required dependency is missing.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("RegenerateBackupCodesUseCase requires repository")
        if backup_codes is None:  # type: ignore[truthy-bool]
            raise ValueError("RegenerateBackupCodesUseCase requires backup_codes")
        if proof_verifier is None:  # type: ignore[truthy-bool]
            raise ValueError("RegenerateBackupCodesUseCase requires proof_verifier")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("RegenerateBackupCodesUseCase requires clock")

        self._repository = repository
        self._backup_codes = backup_codes
        self._proof_verifier = proof_verifier
        self._clock = clock

    def regenerate(
        self,
        *,
        user_id: UserId,
        account_label: str,
        code: str,
    ) -> RegenerateBackupCodesResult:
        """
        Verify TOTP code and store a new batch of backup-code digests.

        Args:
            user_id: Authenticated user id.
            account_label: Account label the secret was issued for.
            code: Submitted TOTP code.
        Returns:
            RegenerateBackupCodesResult: New plaintext codes.
        Assumptions:
            Backup codes cannot authorize their own replacement.
        Raises:
            TwoFactorNotEnabledError: If 2FA is not enabled.
            TwoFactorInvalidCodeError: If the code does not verify.
            RuntimeError: If digests keep changing concurrently.
        Side Effects:
            Replaces stored digests; old codes stop working.
        """
        enrollment = self._proof_verifier.require_enabled(user_id=user_id)
        self._proof_verifier.verify_totp(
            enrollment=enrollment,
            account_label=account_label,
            code=code,
        )

        generated = self._backup_codes.generate_backup_codes()
        for _ in range(_MAX_REPLACE_ATTEMPTS):
            if self._repository.replace_backup_code_hashes(
                user_id=user_id,
                expected_hashes=enrollment.backup_code_hashes,
                new_hashes=generated.hashed_codes,
                updated_at=self._clock.now(),
            ):
                log.info("two-factor backup codes regenerated user_id=%s", user_id)
                return RegenerateBackupCodesResult(backup_codes=generated.codes)
            enrollment = self._proof_verifier.require_enabled(user_id=user_id)

        raise RuntimeError("RegenerateBackupCodesUseCase could not replace backup codes")
