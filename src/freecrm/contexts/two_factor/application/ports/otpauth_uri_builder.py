from __future__ import annotations

from typing import Protocol


class OtpAuthUriBuilder(Protocol):
    """
    OtpAuthUriBuilder — port rendering provisioning URIs for authenticator apps.

    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        otpauth_uri_builder.py
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
    """

    def build_uri(self, *, secret: str, account_label: str, issuer: str) -> str:
        """
        Build `otpauth://totp/...` URI for QR rendering and manual entry.

        Args:
            secret: Base32 TOTP secret.
            account_label: Account label shown in authenticator apps.
            issuer: Issuer label shown in authenticator apps.
        Returns:
            str: Provisioning URI.
        Assumptions:
            The URI embeds the plaintext secret and must never be logged.
        Raises:
            ValueError: If secret, account label or issuer is empty.
        Side Effects:
            None.
        """
        ...
