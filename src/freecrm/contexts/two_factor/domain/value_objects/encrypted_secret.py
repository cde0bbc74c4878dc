from __future__ import annotations

import binascii
from dataclasses import dataclass
from enum import Enum

GCM_IV_LENGTH = 12
GCM_TAG_LENGTH = 16
CBC_IV_LENGTH = 16
CBC_BLOCK_LENGTH = 16
_FIELD_SEPARATOR = ":"


class EncryptedSecretFormat(str, Enum):
    """
    EncryptedSecretFormat — explicit version tag of a stored TOTP secret blob.

    `GCM_V1` is the only format produced by writes. `CBC_LEGACY` exists so secrets stored
    before the cipher migration stay readable.
    """

    GCM_V1 = "gcm_v1"
    CBC_LEGACY = "cbc_legacy"


@dataclass(frozen=True, slots=True)
class EncryptedSecret:
    """
    EncryptedSecret — parsed, format-tagged representation of an encrypted TOTP secret.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        scrypt_aes_secret_cipher.py
      - src/freecrm/contexts/two_factor/domain/entities/two_factor_enrollment.py
    """

    format: EncryptedSecretFormat
    iv: bytes
    ciphertext: bytes
    auth_tag: bytes | None = None

    def __post_init__(self) -> None:
        """
        Validate per-format field lengths.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            GCM ciphertext may be empty (empty plaintext); CBC ciphertext is whole blocks.
        Raises:
            ValueError: If IV/tag/ciphertext lengths do not fit the declared format.
        Side Effects:
            None.
        """
        if self.format is EncryptedSecretFormat.GCM_V1:
            if len(self.iv) != GCM_IV_LENGTH:
                raise ValueError(
                    f"EncryptedSecret gcm_v1 iv must be {GCM_IV_LENGTH} bytes, got {len(self.iv)}"
                )
            if self.auth_tag is None or len(self.auth_tag) != GCM_TAG_LENGTH:
                raise ValueError(
                    f"EncryptedSecret gcm_v1 auth_tag must be {GCM_TAG_LENGTH} bytes"
                )
            return

        if len(self.iv) != CBC_IV_LENGTH:
            raise ValueError(
                f"EncryptedSecret cbc_legacy iv must be {CBC_IV_LENGTH} bytes, got {len(self.iv)}"
            )
        if self.auth_tag is not None:
            raise ValueError("EncryptedSecret cbc_legacy must not carry auth_tag")
        if not self.ciphertext or len(self.ciphertext) % CBC_BLOCK_LENGTH != 0:
            raise ValueError("EncryptedSecret cbc_legacy ciphertext must be whole AES blocks")

    @classmethod
    def parse(cls, serialized: str) -> EncryptedSecret:
        """
        Parse stored `iv:tag:ciphertext` or legacy `iv:ciphertext` text into tagged value.

        Args:
            serialized: Colon-separated hex blob read from storage.
        Returns:
            EncryptedSecret: Value with explicit `format` tag.
        Assumptions:
            The format is fixed by field count and then confirmed by exact field lengths,
            so a blob that only looks like one format by shape is still rejected.
        Raises:
            ValueError: If blob is empty, has unknown shape, or contains invalid hex.
        Side Effects:
            None.
        """
        normalized = serialized.strip()
        if not normalized:
            raise ValueError("EncryptedSecret blob must be non-empty")

        fields = normalized.split(_FIELD_SEPARATOR)
        if len(fields) == 3:
            iv_hex, tag_hex, ciphertext_hex = fields
            return cls(
                format=EncryptedSecretFormat.GCM_V1,
                iv=_decode_hex(value=iv_hex, field_name="iv"),
                auth_tag=_decode_hex(value=tag_hex, field_name="auth_tag"),
                ciphertext=_decode_hex(value=ciphertext_hex, field_name="ciphertext"),
            )
        if len(fields) == 2:
            iv_hex, ciphertext_hex = fields
            return cls(
                format=EncryptedSecretFormat.CBC_LEGACY,
                iv=_decode_hex(value=iv_hex, field_name="iv"),
                ciphertext=_decode_hex(value=ciphertext_hex, field_name="ciphertext"),
            )
        raise ValueError(
            f"EncryptedSecret blob has unsupported shape with {len(fields)} fields"
        )

    def serialize(self) -> str:
        """
        Render storage text for this value.

        Args:
            None.
        Returns:
            str: `ivHex:authTagHex:cipherHex` for GCM, `ivHex:cipherHex` for legacy CBC.
        Assumptions:
            Hex is lowercase, matching blobs written by the previous service.
        Raises:
            None.
        Side Effects:
            None.
        """
        if self.format is EncryptedSecretFormat.GCM_V1:
            assert self.auth_tag is not None
            return _FIELD_SEPARATOR.join(
                (self.iv.hex(), self.auth_tag.hex(), self.ciphertext.hex())
            )
        return _FIELD_SEPARATOR.join((self.iv.hex(), self.ciphertext.hex()))


def _decode_hex(*, value: str, field_name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except (ValueError, binascii.Error) as error:
        raise ValueError(f"EncryptedSecret {field_name} is not valid hex") from error
