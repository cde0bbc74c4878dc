from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from freecrm.contexts.two_factor.application.ports import TwoFactorRepository
from freecrm.contexts.two_factor.application.use_cases.second_factor_proof import (
    SecondFactorProofVerifier,
)
from freecrm.contexts.two_factor.application.use_cases.two_factor_errors import (
    TwoFactorNotEnabledError,
)
from freecrm.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)

_MAX_DELETE_ATTEMPTS = 3


@dataclass(frozen=True, slots=True)
class DisableTwoFactorResult:
    """
    DisableTwoFactorResult — output of `/2fa/disable`.
    """

    enabled: bool

    def __post_init__(self) -> None:
        if self.enabled:
            raise ValueError("DisableTwoFactorResult.enabled must be false")


class DisableTwoFactorUseCase:
    """
    DisableTwoFactorUseCase — remove a user's enrollment, returning them to the disabled state.

    An enabled enrollment requires a fresh TOTP or backup code. A pending enrollment
    protects nothing yet and is dropped without proof.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/second_factor_proof.py
      - src/freecrm/contexts/two_factor/domain/entities/two_factor_enrollment.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorRepository,
        proof_verifier: SecondFactorProofVerifier,
    ) -> None:
        """
        Initialize disable dependencies.

        Args:
            repository: Enrollment persistence port.
            proof_verifier: Second-factor checker.
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
            raise ValueError("DisableTwoFactorUseCase requires repository")
        if proof_verifier is None:  # type: ignore[truthy-bool]
            raise ValueError("DisableTwoFactorUseCase requires proof_verifier")
        self._repository = repository
        self._proof_verifier = proof_verifier

    def disable(
        self,
        *,
        user_id: UserId,
        account_label: str,
        code: str | None = None,
        backup_code: str | None = None,
    ) -> DisableTwoFactorResult:
        """
        Delete the enrollment after checking the second factor.

        Args:
            user_id: Authenticated user id.
            account_label: Account label the secret was issued for.
            code: TOTP code, or `None`.
            backup_code: Backup code, or `None`.
        Returns:
            DisableTwoFactorResult: Disabled marker.
        Assumptions:
            Primary-credential re-authentication is the host application's concern.
        Raises:
            TwoFactorNotEnabledError: If no enrollment exists.
            TwoFactorProofRequiredError: If an enabled enrollment gets neither or both proofs.
            TwoFactorInvalidCodeError: If the proof does not verify.
            RuntimeError: If the enrollment keeps changing state concurrently.
        Side Effects:
            Deletes one enrollment; a pending row enabled meanwhile is re-read and
            requires proof.
        """
        proven_enabled_at: datetime | None = None
        for _ in range(_MAX_DELETE_ATTEMPTS):
            enrollment = self._repository.find_by_user_id(user_id=user_id)
            if enrollment is None:
                raise TwoFactorNotEnabledError()

            if enrollment.enabled and enrollment.enabled_at != proven_enabled_at:
                self._proof_verifier.verify(
                    user_id=user_id,
                    account_label=account_label,
                    code=code,
                    backup_code=backup_code,
                )
                proven_enabled_at = enrollment.enabled_at

            if self._repository.delete(user_id=user_id, expected_state=enrollment.state):
                log.info(
                    "two-factor disabled user_id=%s previous_state=%s",
                    user_id,
                    enrollment.state.value,
                )
                return DisableTwoFactorResult(enabled=False)

        raise RuntimeError("DisableTwoFactorUseCase could not delete enrollment")
