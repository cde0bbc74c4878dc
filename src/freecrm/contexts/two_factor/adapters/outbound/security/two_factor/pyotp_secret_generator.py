from __future__ import annotations

import re

import pyotp

from freecrm.contexts.two_factor.application.ports.totp_secret_generator import (
    TotpSecretGenerator,
    TwoFactorGenerationError,
)

_MIN_SECRET_LENGTH = 32
_BASE32_PATTERN = re.compile(r"[A-Z2-7]+")


class PyOtpTotpSecretGenerator(TotpSecretGenerator):
    """
    PyOtpTotpSecretGenerator — Base32 TOTP secret source backed by `pyotp.random_base32`.

    Related:
      - src/freecrm/contexts/two_factor/application/ports/totp_secret_generator.py
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
    """

    def __init__(self, *, length: int = _MIN_SECRET_LENGTH) -> None:
        """
        Initialize generator with Base32 output length.

        Args:
            length: Number of Base32 characters (5 bits each).
        Returns:
            None.
        Assumptions:
            32 characters encode exactly 20 bytes (160 bits).
        Raises:
            ValueError: If length is below 32 characters.
        Side Effects:
            None.
        """
        if length < _MIN_SECRET_LENGTH:
            raise ValueError(
                f"PyOtpTotpSecretGenerator length must be >= {_MIN_SECRET_LENGTH}, got {length}"
            )
        self._length = length

    def generate_secret(self) -> str:
        """
        Generate new Base32 TOTP secret.

        Args:
            None.
        Returns:
            str: Uppercase unpadded Base32 secret.
        Assumptions:
            `pyotp.random_base32` draws from the `secrets` CSPRNG.
        Raises:
            TwoFactorGenerationError: If the OS random source is unavailable or output
                is malformed.
        Side Effects:
            Reads OS CSPRNG.
        """
        try:
            secret = pyotp.random_base32(length=self._length)
        except (OSError, NotImplementedError) as error:
            raise TwoFactorGenerationError("secure random source is unavailable") from error
        if _BASE32_PATTERN.fullmatch(secret) is None:
            raise TwoFactorGenerationError("generated TOTP secret is not valid Base32")
        return secret
