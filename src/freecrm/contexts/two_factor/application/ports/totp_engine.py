from __future__ import annotations

from typing import Protocol


class TotpEngine(Protocol):
    """
    TotpEngine — port of RFC 6238 code generation and verification.

    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        pyotp_totp_engine.py
      - src/freecrm/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
      - src/freecrm/contexts/two_factor/application/use_cases/verify_two_factor_challenge.py
    """

    def generate_current_token(self, *, secret: str, account_label: str) -> str:
        """
        Compute the code valid for the current time step.

        Args:
            secret: Base32 TOTP secret.
            account_label: Account label the secret was issued for.
        Returns:
            str: Six-digit zero-padded code.
        Assumptions:
            Current time comes from the engine clock.
        Raises:
            ValueError: If secret is not valid Base32 or label is empty.
        Side Effects:
            None.
        """
        ...

    def verify_token(self, *, secret: str, candidate: str, account_label: str) -> bool:
        """
        Verify a submitted code against the current step and its neighbours.

        Args:
            secret: Base32 TOTP secret.
            candidate: User-submitted code.
            account_label: Account label the secret was issued for.
        Returns:
            bool: `True` if the code matches any step in the tolerance window.
        Assumptions:
            A wrong code is a normal outcome and is never raised.
        Raises:
            ValueError: If secret is not valid Base32 or label is empty.
        Side Effects:
            None.
        """
        ...
