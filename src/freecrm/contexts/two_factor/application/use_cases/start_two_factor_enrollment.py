from __future__ import annotations

import logging
from dataclasses import dataclass

from freecrm.contexts.two_factor.application.ports import (
    BackupCodeManager,
    TwoFactorClock,
    TwoFactorRepository,
    TwoFactorSecretCipher,
)
from freecrm.contexts.two_factor.application.use_cases.setup_two_factor import (
    SetupTwoFactorUseCase,
)
from freecrm.contexts.two_factor.application.use_cases.two_factor_errors import (
    TwoFactorAlreadyEnabledError,
)
from freecrm.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StartTwoFactorEnrollmentResult:
    """
    StartTwoFactorEnrollmentResult — one-time enrollment material returned by `/2fa/setup`.

    Plaintext secret and backup codes exist only in this object; storage holds the
    encrypted secret and the code digests.

    Related:
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
    """

    secret: str
    uri: str
    qr_code_data_url: str
    backup_codes: tuple[str, ...]

    def __repr__(self) -> str:
        return f"StartTwoFactorEnrollmentResult(backup_codes={len(self.backup_codes)})"


class StartTwoFactorEnrollmentUseCase:
    """
    StartTwoFactorEnrollmentUseCase — create or replace a pending enrollment for the user.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
      - src/freecrm/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
      - src/freecrm/contexts/two_factor/application/ports/two_factor_repository.py
    """

    def __init__(
        self,
        *,
        setup: SetupTwoFactorUseCase,
        backup_codes: BackupCodeManager,
        secret_cipher: TwoFactorSecretCipher,
        repository: TwoFactorRepository,
        clock: TwoFactorClock,
    ) -> None:
        """
        Initialize enrollment dependencies.

        Args:
            setup: Secret/URI/QR orchestrator.
            backup_codes: Backup-code generator.
            secret_cipher: Secret encryption port.
            repository: Enrollment persistence port.
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
        if setup is None:  # type: ignore[truthy-bool]
            raise ValueError("StartTwoFactorEnrollmentUseCase requires setup")
        if backup_codes is None:  # type: ignore[truthy-bool]
            raise ValueError("StartTwoFactorEnrollmentUseCase requires backup_codes")
        if secret_cipher is None:  # type: ignore[truthy-bool]
            raise ValueError("StartTwoFactorEnrollmentUseCase requires secret_cipher")
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("StartTwoFactorEnrollmentUseCase requires repository")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("StartTwoFactorEnrollmentUseCase requires clock")

        self._setup = setup
        self._backup_codes = backup_codes
        self._secret_cipher = secret_cipher
        self._repository = repository
        self._clock = clock

    def start(self, *, user_id: UserId, account_label: str) -> StartTwoFactorEnrollmentResult:
        """
        Generate enrollment material and store it as pending verification.

        Args:
            user_id: Authenticated user id.
            account_label: Account label for the provisioning URI.
        Returns:
            StartTwoFactorEnrollmentResult: Secret, URI, QR code and plaintext backup codes.
        Assumptions:
            Repeating setup while pending replaces the previous secret and codes; an
            enrollment enabled concurrently is never reset.
        Raises:
            TwoFactorAlreadyEnabledError: If 2FA is already enabled.
            TwoFactorGenerationError: If randomness is unavailable.
        Side Effects:
            Encrypts the secret and writes one pending enrollment.
        """
        existing = self._repository.find_by_user_id(user_id=user_id)
        if existing is not None and existing.enabled:
            raise TwoFactorAlreadyEnabledError()

        setup_result = self._setup.setup(account_label=account_label)
        backup_codes = self._backup_codes.generate_backup_codes()
        secret_enc = self._secret_cipher.encrypt_secret(secret=setup_result.secret)

        upserted = self._repository.upsert_pending(
            user_id=user_id,
            secret_enc=secret_enc,
            backup_code_hashes=backup_codes.hashed_codes,
            updated_at=self._clock.now(),
        )
        if upserted.enabled:
            raise TwoFactorAlreadyEnabledError()
        log.info(
            "two-factor enrollment started user_id=%s replaced_pending=%s",
            user_id,
            existing is not None,
        )
        return StartTwoFactorEnrollmentResult(
            secret=setup_result.secret,
            uri=setup_result.uri,
            qr_code_data_url=setup_result.qr_code_data_url,
            backup_codes=backup_codes.codes,
        )
