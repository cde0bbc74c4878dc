from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NoReturn

from freecrm.contexts.two_factor.application.ports import (
    TotpEngine,
    TwoFactorClock,
    TwoFactorRepository,
    TwoFactorSecretCipher,
)
from freecrm.contexts.two_factor.application.use_cases.two_factor_errors import (
    TwoFactorAlreadyEnabledError,
    TwoFactorInvalidCodeError,
    TwoFactorSetupRequiredError,
)
from freecrm.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConfirmTwoFactorEnrollmentResult:
    """
    ConfirmTwoFactorEnrollmentResult — output of `/2fa/verify`.
    """

    enabled: bool

    def __post_init__(self) -> None:
        if not self.enabled:
            raise ValueError("ConfirmTwoFactorEnrollmentResult.enabled must be true")


class ConfirmTwoFactorEnrollmentUseCase:
    """
    ConfirmTwoFactorEnrollmentUseCase — first successful TOTP code enables a pending enrollment.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/start_two_factor_enrollment.py
      - src/freecrm/contexts/two_factor/domain/entities/two_factor_enrollment.py
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorRepository,
        secret_cipher: TwoFactorSecretCipher,
        totp_engine: TotpEngine,
        clock: TwoFactorClock,
    ) -> None:
        """
        Initialize confirmation dependencies.

        Args:
            repository: Enrollment persistence port.
            secret_cipher: Secret decryption port.
            totp_engine: TOTP verification engine.
            clock: UTC time source for the enable timestamp.
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
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires repository")
        if secret_cipher is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires secret_cipher")
        if totp_engine is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires totp_engine")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("ConfirmTwoFactorEnrollmentUseCase requires clock")

        self._repository = repository
        self._secret_cipher = secret_cipher
        self._totp_engine = totp_engine
        self._clock = clock

    def confirm(
        self,
        *,
        user_id: UserId,
        account_label: str,
        code: str,
    ) -> ConfirmTwoFactorEnrollmentResult:
        """
        Verify code against the pending secret and enable 2FA on success.

        Args:
            user_id: Authenticated user id.
            account_label: Account label the secret was issued for.
            code: Submitted TOTP code.
        Returns:
            ConfirmTwoFactorEnrollmentResult: Enabled marker.
        Assumptions:
            Backup codes are not accepted here; the authenticator app must be proven.
        Raises:
            TwoFactorSetupRequiredError: If no enrollment exists.
            TwoFactorAlreadyEnabledError: If 2FA is already enabled.
            TwoFactorInvalidCodeError: If the code does not verify, or setup was restarted
                with another secret while it was being checked.
            SecretDecryptionError: If the stored secret cannot be decrypted.
        Side Effects:
            Decrypts the secret in memory and writes the enabled state.
        """
        enrollment = self._repository.find_by_user_id(user_id=user_id)
        if enrollment is None:
            raise TwoFactorSetupRequiredError()
        if enrollment.enabled:
            raise TwoFactorAlreadyEnabledError()

        secret = self._secret_cipher.decrypt_secret(secret_enc=enrollment.secret_enc)
        if not self._totp_engine.verify_token(
            secret=secret,
            candidate=code.strip(),
            account_label=account_label,
        ):
            log.info("two-factor enrollment confirmation failed user_id=%s", user_id)
            raise TwoFactorInvalidCodeError()

        now = self._clock.now()
        enabled = self._repository.enable(
            user_id=user_id,
            expected_secret_enc=enrollment.secret_enc,
            enabled_at=now,
            updated_at=now,
        )
        if enabled is None:
            self._raise_for_superseded(user_id=user_id)
        log.info("two-factor enrollment enabled user_id=%s", user_id)
        return ConfirmTwoFactorEnrollmentResult(enabled=True)

    def _raise_for_superseded(self, *, user_id: UserId) -> NoReturn:
        """
        Map an enrollment that changed after verification to the matching error.

        Args:
            user_id: Authenticated user id.
        Returns:
            Never returns.
        Assumptions:
            Called only after a verified code lost the enable compare-and-set.
        Raises:
            TwoFactorSetupRequiredError: If the enrollment was removed.
            TwoFactorAlreadyEnabledError: If another request enabled it first.
            TwoFactorInvalidCodeError: If setup was restarted with a new secret.
        Side Effects:
            Reads one enrollment.
        """
        current = self._repository.find_by_user_id(user_id=user_id)
        log.info(
            "two-factor enrollment changed before enable user_id=%s state=%s",
            user_id,
            None if current is None else current.state.value,
        )
        if current is None:
            raise TwoFactorSetupRequiredError()
        if current.enabled:
            raise TwoFactorAlreadyEnabledError()
        raise TwoFactorInvalidCodeError()
