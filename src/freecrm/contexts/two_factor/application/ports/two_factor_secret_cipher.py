from __future__ import annotations

from typing import Protocol


class SecretDecryptionError(ValueError):
    """
    SecretDecryptionError — stored secret blob is malformed, tampered, or keyed differently.

    Raised instead of ever returning a best-guess plaintext.
    """


class TwoFactorSecretCipher(Protocol):
    """
    TwoFactorSecretCipher — port of at-rest encryption for the shared TOTP secret.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        scrypt_aes_secret_cipher.py
      - src/freecrm/contexts/two_factor/application/use_cases/start_two_factor_enrollment.py
    """

    def encrypt_secret(self, *, secret: str) -> str:
        """
        Encrypt plaintext TOTP secret into storage text.

        Args:
            secret: Plaintext secret.
        Returns:
            str: Serialized blob in the current authenticated format.
        Assumptions:
            Two calls with the same plaintext produce different blobs.
        Raises:
            TwoFactorGenerationError: If the random source is unavailable.
        Side Effects:
            Reads OS CSPRNG for the IV.
        """
        ...

    def decrypt_secret(self, *, secret_enc: str) -> str:
        """
        Decrypt storage text produced by this or the legacy cipher.

        Args:
            secret_enc: Serialized blob from storage.
        Returns:
            str: Plaintext secret.
        Assumptions:
            Plaintext is held in memory only for the duration of one verification.
        Raises:
            SecretDecryptionError: If the blob is malformed, tampered, or wrong-keyed.
        Side Effects:
            None.
        """
        ...
