from __future__ import annotations

import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from freecrm.contexts.two_factor.application.ports.totp_secret_generator import (
    TwoFactorGenerationError,
)
from freecrm.contexts.two_factor.application.ports.two_factor_secret_cipher import (
    SecretDecryptionError,
    TwoFactorSecretCipher,
)
from freecrm.contexts.two_factor.domain.value_objects import (
    EncryptedSecret,
    EncryptedSecretFormat,
)
from freecrm.contexts.two_factor.domain.value_objects.encrypted_secret import (
    GCM_IV_LENGTH,
    GCM_TAG_LENGTH,
)

log = logging.getLogger(__name__)

_KEY_LENGTH = 32
# scrypt cost parameters match Node `crypto.scryptSync` defaults used by existing blobs.
_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1
_DEFAULT_KDF_SALT = b"salt"
_AES_BLOCK_BITS = 128


class ScryptAesTwoFactorSecretCipher(TwoFactorSecretCipher):
    """
    ScryptAesTwoFactorSecretCipher — AES-256-GCM cipher for TOTP secrets with legacy CBC reads.

    The 256-bit key is derived once from the configured passphrase with scrypt. Writes
    always produce `iv:authTag:ciphertext`; reads also accept legacy `iv:ciphertext`
    AES-256-CBC blobs so secrets stored before the migration keep working.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/two_factor_secret_cipher.py
      - src/freecrm/contexts/two_factor/domain/value_objects/encrypted_secret.py
      - apps/api/wiring/modules/two_factor.py
    """

    def __init__(self, *, encryption_key: str, kdf_salt: bytes = _DEFAULT_KDF_SALT) -> None:
        """
        Derive the AES key from passphrase and salt.

        Args:
            encryption_key: Passphrase from `TWO_FACTOR_ENCRYPTION_KEY`.
            kdf_salt: scrypt salt shared by all stored secrets.
        Returns:
            None.
        Assumptions:
            Derivation is deliberately slow; construct the cipher once at startup.
        Raises:
            ValueError: If passphrase or salt is empty.
        Side Effects:
            Runs scrypt once.
        """
        if not encryption_key:
            raise ValueError("ScryptAesTwoFactorSecretCipher requires non-empty encryption_key")
        if not kdf_salt:
            raise ValueError("ScryptAesTwoFactorSecretCipher requires non-empty kdf_salt")
        self._key = derive_secret_key(encryption_key=encryption_key, kdf_salt=kdf_salt)

    def encrypt_secret(self, *, secret: str) -> str:
        """
        Encrypt plaintext secret with a fresh 96-bit IV.

        Args:
            secret: Plaintext TOTP secret.
        Returns:
            str: `ivHex:authTagHex:cipherHex`.
        Assumptions:
            Never emits the legacy CBC format.
        Raises:
            TwoFactorGenerationError: If the OS random source is unavailable.
        Side Effects:
            Reads OS CSPRNG.
        """
        try:
            iv = os.urandom(GCM_IV_LENGTH)
        except (OSError, NotImplementedError) as error:
            raise TwoFactorGenerationError("secure random source is unavailable") from error
        sealed = AESGCM(self._key).encrypt(iv, secret.encode("utf-8"), None)
        encrypted = EncryptedSecret(
            format=EncryptedSecretFormat.GCM_V1,
            iv=iv,
            auth_tag=sealed[-GCM_TAG_LENGTH:],
            ciphertext=sealed[:-GCM_TAG_LENGTH],
        )
        return encrypted.serialize()

    def decrypt_secret(self, *, secret_enc: str) -> str:
        """
        Decrypt a stored blob, dispatching on its explicit format tag.

        Args:
            secret_enc: Serialized blob from storage.
        Returns:
            str: Plaintext secret.
        Assumptions:
            GCM blobs are authenticated; legacy CBC blobs are only padding-checked.
        Raises:
            SecretDecryptionError: If the blob is malformed, the tag does not verify,
                padding is invalid, or plaintext is not UTF-8.
        Side Effects:
            Logs a warning when a legacy CBC blob is read.
        """
        try:
            encrypted = EncryptedSecret.parse(secret_enc)
        except ValueError as error:
            raise SecretDecryptionError(f"Encrypted 2FA secret blob is malformed: {error}") from error

        if encrypted.format is EncryptedSecretFormat.GCM_V1:
            plaintext = self._decrypt_gcm(encrypted=encrypted)
        else:
            plaintext = self._decrypt_cbc_legacy(encrypted=encrypted)
            log.warning("two-factor secret read from legacy cbc blob; re-encrypt on next write")

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as error:
            raise SecretDecryptionError("Encrypted 2FA secret plaintext is not valid UTF-8") from error

    def _decrypt_gcm(self, *, encrypted: EncryptedSecret) -> bytes:
        assert encrypted.auth_tag is not None
        try:
            return AESGCM(self._key).decrypt(
                encrypted.iv,
                encrypted.ciphertext + encrypted.auth_tag,
                None,
            )
        except InvalidTag as error:
            raise SecretDecryptionError("Encrypted 2FA secret blob authentication failed") from error

    def _decrypt_cbc_legacy(self, *, encrypted: EncryptedSecret) -> bytes:
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(encrypted.iv)).decryptor()
        padded = decryptor.update(encrypted.ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(_AES_BLOCK_BITS).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as error:
            raise SecretDecryptionError("Encrypted 2FA legacy secret has invalid padding") from error


def derive_secret_key(*, encryption_key: str, kdf_salt: bytes = _DEFAULT_KDF_SALT) -> bytes:
    """
    Derive the 256-bit AES key with scrypt.

    Args:
        encryption_key: Passphrase.
        kdf_salt: Salt bytes.
    Returns:
        bytes: 32-byte key.
    Assumptions:
        Parameters equal Node `scryptSync(key, salt, 32)` so keys match the old service.
    Raises:
        None.
    Side Effects:
        None.
    """
    kdf = Scrypt(salt=kdf_salt, length=_KEY_LENGTH, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P)
    return kdf.derive(encryption_key.encode("utf-8"))
