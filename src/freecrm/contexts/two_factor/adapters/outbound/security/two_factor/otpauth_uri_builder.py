from __future__ import annotations

from urllib.parse import quote

from freecrm.contexts.two_factor.application.ports.otpauth_uri_builder import OtpAuthUriBuilder

_ALGORITHM = "SHA1"
_DIGITS = 6
_PERIOD_SECONDS = 30


class StandardOtpAuthUriBuilder(OtpAuthUriBuilder):
    """
    StandardOtpAuthUriBuilder — Key Uri Format renderer with explicit algorithm/digits/period.

    Parameters are always written out, even at their defaults, so every authenticator app
    reads the same SHA1/6/30 policy.

    Related:
      - src/freecrm/contexts/two_factor/application/ports/otpauth_uri_builder.py
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
    """

    def build_uri(self, *, secret: str, account_label: str, issuer: str) -> str:
        """
        Build standard otpauth URI.

        Args:
            secret: Base32 TOTP secret.
            account_label: Account label shown in authenticator apps.
            issuer: Issuer label shown in authenticator apps.
        Returns:
            str: `otpauth://totp/{issuer}:{account}?secret=..&issuer=..&algorithm=SHA1
                &digits=6&period=30` with percent-encoded issuer and account.
        Assumptions:
            Spaces encode as `%20`, never `+`.
        Raises:
            ValueError: If secret, account label or issuer is empty.
        Side Effects:
            None.
        """
        normalized_secret = secret.strip().upper()
        normalized_label = account_label.strip()
        normalized_issuer = issuer.strip()
        if not normalized_secret:
            raise ValueError("StandardOtpAuthUriBuilder requires non-empty secret")
        if not normalized_label:
            raise ValueError("StandardOtpAuthUriBuilder requires non-empty account_label")
        if not normalized_issuer:
            raise ValueError("StandardOtpAuthUriBuilder requires non-empty issuer")

        encoded_issuer = quote(normalized_issuer, safe="")
        encoded_label = quote(normalized_label, safe="")
        query = "&".join(
            (
                f"secret={normalized_secret}",
                f"issuer={encoded_issuer}",
                f"algorithm={_ALGORITHM}",
                f"digits={_DIGITS}",
                f"period={_PERIOD_SECONDS}",
            )
        )
        return f"otpauth://totp/{encoded_issuer}:{encoded_label}?{query}"
