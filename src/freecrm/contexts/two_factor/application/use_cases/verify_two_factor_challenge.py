from __future__ import annotations

import logging
from dataclasses import dataclass

from freecrm.contexts.two_factor.application.use_cases.second_factor_proof import (
    SecondFactorMethod,
    SecondFactorProofVerifier,
)
from freecrm.contexts.two_factor.application.use_cases.two_factor_errors import (
    TwoFactorInvalidCodeError,
)
from freecrm.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerifyTwoFactorChallengeResult:
    """
    VerifyTwoFactorChallengeResult — outcome of a passed login second-factor challenge.

    `remaining_backup_codes` lets the UI nudge the user to regenerate codes.
    """

    method: SecondFactorMethod
    remaining_backup_codes: int


class VerifyTwoFactorChallengeUseCase:
    """
    VerifyTwoFactorChallengeUseCase — login second factor using a TOTP code or a backup code.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/second_factor_proof.py
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
    """

    def __init__(self, *, proof_verifier: SecondFactorProofVerifier) -> None:
        if proof_verifier is None:  # type: ignore[truthy-bool]
            raise ValueError("VerifyTwoFactorChallengeUseCase requires proof_verifier")
        self._proof_verifier = proof_verifier

    def verify(
        self,
        *,
        user_id: UserId,
        account_label: str,
        code: str | None = None,
        backup_code: str | None = None,
    ) -> VerifyTwoFactorChallengeResult:
        """
        Check the submitted second factor.

        Args:
            user_id: User completing login.
            account_label: Account label the secret was issued for.
            code: TOTP code, or `None` when a backup code is used.
            backup_code: Backup code, or `None` when a TOTP code is used.
        Returns:
            VerifyTwoFactorChallengeResult: Method used and backup codes left.
        Assumptions:
            Caller owns session issuance and rate limiting.
        Raises:
            TwoFactorProofRequiredError: If neither or both proofs are given.
            TwoFactorNotEnabledError: If 2FA is not enabled.
            TwoFactorInvalidCodeError: If the proof does not verify.
        Side Effects:
            Consumes the backup code when one is used.
        """
        has_code = code is not None and bool(code.strip())
        method = SecondFactorMethod.TOTP if has_code else SecondFactorMethod.BACKUP_CODE
        try:
            method, remaining = self._proof_verifier.verify(
                user_id=user_id,
                account_label=account_label,
                code=code,
                backup_code=backup_code,
            )
        except TwoFactorInvalidCodeError:
            log.info(
                "two-factor challenge failed user_id=%s method=%s",
                user_id,
                method.value,
            )
            raise

        log.info(
            "two-factor challenge passed user_id=%s method=%s",
            user_id,
            method.value,
        )
        return VerifyTwoFactorChallengeResult(method=method, remaining_backup_codes=remaining)
