from __future__ import annotations

import logging
from enum import Enum

from freecrm.contexts.two_factor.application.ports import (
    BackupCodeManager,
    TotpEngine,
    TwoFactorClock,
    TwoFactorRepository,
    TwoFactorSecretCipher,
)
from freecrm.contexts.two_factor.application.use_cases.two_factor_errors import (
    TwoFactorInvalidCodeError,
    TwoFactorNotEnabledError,
    TwoFactorProofRequiredError,
)
from freecrm.contexts.two_factor.domain.entities import TwoFactorEnrollment
from freecrm.shared_kernel.primitives import UserId

log = logging.getLogger(__name__)

_MAX_CONSUME_ATTEMPTS = 3


class SecondFactorMethod(str, Enum):
    """
    SecondFactorMethod — which proof satisfied a second-factor check.
    """

    TOTP = "totp"
    BACKUP_CODE = "backup_code"


class SecondFactorProofVerifier:
    """
    SecondFactorProofVerifier — checks a TOTP code or spends a backup code for an enabled user.

    Backup-code spending is a read, verify, compare-and-set loop so one code can succeed
    for at most one concurrent caller.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/verify_two_factor_challenge.py
      - src/freecrm/contexts/two_factor/application/use_cases/disable_two_factor.py
      - src/freecrm/contexts/two_factor/application/ports/two_factor_repository.py
    """

    def __init__(
        self,
        *,
        repository: TwoFactorRepository,
        secret_cipher: TwoFactorSecretCipher,
        totp_engine: TotpEngine,
        backup_codes: BackupCodeManager,
        clock: TwoFactorClock,
    ) -> None:
        """
        Initialize verifier dependencies.

        Args:
            repository: Enrollment persistence port.
            secret_cipher: Secret decryption port.
            totp_engine: TOTP verification engine.
            backup_codes: Backup-code verifier.
            clock: UTC time source for write timestamps.
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
            raise ValueError("SecondFactorProofVerifier requires repository")
        if secret_cipher is None:  # type: ignore[truthy-bool]
            raise ValueError("SecondFactorProofVerifier requires secret_cipher")
        if totp_engine is None:  # type: ignore[truthy-bool]
            raise ValueError("SecondFactorProofVerifier requires totp_engine")
        if backup_codes is None:  # type: ignore[truthy-bool]
            raise ValueError("SecondFactorProofVerifier requires backup_codes")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("SecondFactorProofVerifier requires clock")

        self._repository = repository
        self._secret_cipher = secret_cipher
        self._totp_engine = totp_engine
        self._backup_codes = backup_codes
        self._clock = clock

    def require_enabled(self, *, user_id: UserId) -> TwoFactorEnrollment:
        """
        Load the enrollment and require it to be enabled.

        Args:
            user_id: Authenticated user id.
        Returns:
            TwoFactorEnrollment: Enabled snapshot.
        Assumptions:
            Pending enrollments do not protect login yet.
        Raises:
            TwoFactorNotEnabledError: If enrollment is missing or pending.
        Side Effects:
            Reads one storage record.
        """
        enrollment = self._repository.find_by_user_id(user_id=user_id)
        if enrollment is None or not enrollment.enabled:
            raise TwoFactorNotEnabledError()
        return enrollment

    def verify_totp(
        self,
        *,
        enrollment: TwoFactorEnrollment,
        account_label: str,
        code: str,
    ) -> None:
        """
        Verify a TOTP code against the enrollment secret.

        Args:
            enrollment: Enabled snapshot.
            account_label: Account label the secret was issued for.
            code: Submitted TOTP code.
        Returns:
            None.
        Assumptions:
            No replay tracking; a code stays valid for its whole window.
        Raises:
            TwoFactorInvalidCodeError: If the code does not verify.
            SecretDecryptionError: If the stored secret cannot be decrypted.
        Side Effects:
            Decrypts the secret in memory.
        """
        secret = self._secret_cipher.decrypt_secret(secret_enc=enrollment.secret_enc)
        if not self._totp_engine.verify_token(
            secret=secret,
            candidate=code.strip(),
            account_label=account_label,
        ):
            raise TwoFactorInvalidCodeError()

    def consume_backup_code(self, *, enrollment: TwoFactorEnrollment, backup_code: str) -> int:
        """
        Spend one backup code atomically.

        Args:
            enrollment: Enabled snapshot read by the caller.
            backup_code: Submitted backup code.
        Returns:
            int: Number of backup codes left after consumption.
        Assumptions:
            A failed compare-and-set means another writer changed the digests; the
            fresh digests are re-checked, so a code spent meanwhile no longer matches.
        Raises:
            TwoFactorInvalidCodeError: If the code does not match an unused digest.
            TwoFactorNotEnabledError: If the enrollment disappeared meanwhile.
        Side Effects:
            Writes the reduced digest list.
        """
        current = enrollment
        for _ in range(_MAX_CONSUME_ATTEMPTS):
            index = self._backup_codes.verify_backup_code(
                candidate=backup_code,
                hashed_codes=current.backup_code_hashes,
            )
            if index is None:
                raise TwoFactorInvalidCodeError()

            remaining = self._backup_codes.remove_used_backup_code(
                hashed_codes=current.backup_code_hashes,
                index=index,
            )
            if self._repository.replace_backup_code_hashes(
                user_id=current.user_id,
                expected_hashes=current.backup_code_hashes,
                new_hashes=remaining,
                updated_at=self._clock.now(),
            ):
                log.info(
                    "two-factor backup code consumed user_id=%s remaining=%s",
                    current.user_id,
                    len(remaining),
                )
                return len(remaining)

            current = self.require_enabled(user_id=current.user_id)

        log.warning(
            "two-factor backup code consumption contended user_id=%s attempts=%s",
            enrollment.user_id,
            _MAX_CONSUME_ATTEMPTS,
        )
        raise TwoFactorInvalidCodeError()

    def verify(
        self,
        *,
        user_id: UserId,
        account_label: str,
        code: str | None,
        backup_code: str | None,
    ) -> tuple[SecondFactorMethod, int]:
        """
        Check exactly one proof for an enabled user.

        Args:
            user_id: Authenticated user id.
            account_label: Account label the secret was issued for.
            code: Submitted TOTP code or `None`.
            backup_code: Submitted backup code or `None`.
        Returns:
            tuple[SecondFactorMethod, int]: Method that passed and backup codes left.
        Assumptions:
            Blank strings count as absent.
        Raises:
            TwoFactorProofRequiredError: If neither or both proofs are present.
            TwoFactorNotEnabledError: If 2FA is not enabled.
            TwoFactorInvalidCodeError: If the proof does not verify.
        Side Effects:
            May consume one backup code.
        """
        has_code = code is not None and bool(code.strip())
        has_backup_code = backup_code is not None and bool(backup_code.strip())
        if has_code == has_backup_code:
            raise TwoFactorProofRequiredError()

        enrollment = self.require_enabled(user_id=user_id)
        if has_code:
            assert code is not None
            self.verify_totp(enrollment=enrollment, account_label=account_label, code=code)
            return SecondFactorMethod.TOTP, enrollment.remaining_backup_codes

        assert backup_code is not None
        remaining = self.consume_backup_code(enrollment=enrollment, backup_code=backup_code)
        return SecondFactorMethod.BACKUP_CODE, remaining
