from __future__ import annotations

from typing import Protocol


class TwoFactorGenerationError(RuntimeError):
    """
    TwoFactorGenerationError — secure randomness was unavailable while generating 2FA material.

    Fatal for the current enrollment attempt and never retried by the subsystem.
    """


class TotpSecretGenerator(Protocol):
    """
    TotpSecretGenerator — port producing fresh shared TOTP secrets.

    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        pyotp_secret_generator.py
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
    """

    def generate_secret(self) -> str:
        """
        Generate new Base32 TOTP secret.

        Args:
            None.
        Returns:
            str: Unpadded RFC 4648 Base32 string encoding at least 160 random bits.
        Assumptions:
            Secret comes from a cryptographically secure random source.
        Raises:
            TwoFactorGenerationError: If the random source is unavailable.
        Side Effects:
            Reads OS CSPRNG.
        """
        ...
