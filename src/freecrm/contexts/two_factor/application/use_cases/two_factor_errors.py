from __future__ import annotations


class TwoFactorOperationError(ValueError):
    """
    TwoFactorOperationError — base application error for 2FA flows with a fixed HTTP mapping.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
    """

    def __init__(self, *, code: str, message: str, status_code: int) -> None:
        """
        Store machine code, human message and HTTP status.

        Args:
            code: Stable machine-readable error code.
            message: Human-readable message.
            status_code: HTTP status the inbound adapter returns.
        Returns:
            None.
        Assumptions:
            Status code needs no further mapping in the adapter.
        Raises:
            None.
        Side Effects:
            None.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def payload(self) -> dict[str, str]:
        """
        Build HTTP error payload.

        Args:
            None.
        Returns:
            dict[str, str]: `{"error": "...", "message": "..."}`.
        Assumptions:
            Consumed by FastAPI `HTTPException.detail`.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {
            "error": self.code,
            "message": self.message,
        }


class TwoFactorAlreadyEnabledError(TwoFactorOperationError):
    """
    TwoFactorAlreadyEnabledError — setup or confirmation requested while 2FA is enabled.
    """

    def __init__(self) -> None:
        super().__init__(
            code="two_factor_already_enabled",
            message="Two-factor authentication is already enabled.",
            status_code=409,
        )


class TwoFactorSetupRequiredError(TwoFactorOperationError):
    """
    TwoFactorSetupRequiredError — confirmation requested before setup stored a secret.
    """

    def __init__(self) -> None:
        super().__init__(
            code="two_factor_setup_required",
            message="Two-factor setup must be completed first.",
            status_code=422,
        )


class TwoFactorNotEnabledError(TwoFactorOperationError):
    """
    TwoFactorNotEnabledError — operation needs an enabled enrollment and there is none.
    """

    def __init__(self) -> None:
        super().__init__(
            code="two_factor_not_enabled",
            message="Two-factor authentication is not enabled.",
            status_code=409,
        )


class TwoFactorInvalidCodeError(TwoFactorOperationError):
    """
    TwoFactorInvalidCodeError — submitted TOTP or backup code did not verify.

    Malformed and wrong codes produce the same error so callers learn nothing about
    which check failed.
    """

    def __init__(self) -> None:
        super().__init__(
            code="invalid_two_factor_code",
            message="Invalid two-factor authentication code.",
            status_code=422,
        )


class TwoFactorProofRequiredError(TwoFactorOperationError):
    """
    TwoFactorProofRequiredError — request carried neither or both of TOTP code and backup code.
    """

    def __init__(self) -> None:
        super().__init__(
            code="two_factor_proof_required",
            message="Provide exactly one of a verification code or a backup code.",
            status_code=422,
        )
