from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from freecrm.contexts.two_factor.adapters.inbound.api.deps.current_user import (
    CurrentUserDependency,
)
from freecrm.contexts.two_factor.application.ports.current_user import CurrentUserPrincipal
from freecrm.contexts.two_factor.application.use_cases import (
    ConfirmTwoFactorEnrollmentUseCase,
    DisableTwoFactorUseCase,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesUseCase,
    StartTwoFactorEnrollmentUseCase,
    TwoFactorOperationError,
    VerifyTwoFactorChallengeUseCase,
)


class TwoFactorSetupResponse(BaseModel):
    """
    TwoFactorSetupResponse — one-time enrollment material for `POST /2fa/setup`.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/start_two_factor_enrollment.py
    """

    secret: str
    otpauth_uri: str
    qr_code_data_url: str
    backup_codes: list[str]


class TwoFactorCodeRequest(BaseModel):
    """
    TwoFactorCodeRequest — TOTP code payload for `POST /2fa/verify` and `POST /2fa/backup-codes`.
    """

    code: str


class TwoFactorProofRequest(BaseModel):
    """
    TwoFactorProofRequest — either a TOTP code or a backup code.

    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/second_factor_proof.py
    """

    code: str | None = None
    backup_code: str | None = None


class TwoFactorEnabledResponse(BaseModel):
    enabled: bool


class TwoFactorChallengeResponse(BaseModel):
    verified: bool
    method: str
    remaining_backup_codes: int


class BackupCodesStatusResponse(BaseModel):
    remaining: int
    total: int
    warning_threshold: int
    needs_regeneration: bool


class BackupCodesResponse(BaseModel):
    backup_codes: list[str]


def build_two_factor_router(
    *,
    start_use_case: StartTwoFactorEnrollmentUseCase,
    confirm_use_case: ConfirmTwoFactorEnrollmentUseCase,
    challenge_use_case: VerifyTwoFactorChallengeUseCase,
    disable_use_case: DisableTwoFactorUseCase,
    regenerate_use_case: RegenerateBackupCodesUseCase,
    status_use_case: GetBackupCodesStatusUseCase,
    current_user_dependency: CurrentUserDependency,
) -> APIRouter:
    """
    Build router exposing 2FA enrollment, challenge, disable and backup-code endpoints.

    Args:
        start_use_case: Enrollment start use case.
        confirm_use_case: Enrollment confirmation use case.
        challenge_use_case: Login second-factor use case.
        disable_use_case: Disable use case.
        regenerate_use_case: Backup-code regeneration use case.
        status_use_case: Backup-code status use case.
        current_user_dependency: Host dependency resolving the authenticated principal.
    Returns:
        APIRouter: Router with `/2fa/*` endpoints.
    Assumptions:
        For `/2fa/challenge` the host dependency resolves the user awaiting its second
        factor; session issuance stays with the host.
    Raises:
        ValueError: If required dependencies are missing.
    Side Effects:
        None.
    """
    if start_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires start_use_case")
    if confirm_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires confirm_use_case")
    if challenge_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires challenge_use_case")
    if disable_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires disable_use_case")
    if regenerate_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires regenerate_use_case")
    if status_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires status_use_case")
    if current_user_dependency is None:  # type: ignore[truthy-bool]
        raise ValueError("build_two_factor_router requires current_user_dependency")

    router = APIRouter(tags=["two_factor"])

    @router.post("/2fa/setup", response_model=TwoFactorSetupResponse)
    def post_two_factor_setup(
        principal: CurrentUserPrincipal = Depends(current_user_dependency),
    ) -> TwoFactorSetupResponse:
        """
        Start or restart enrollment and return secret, URI, QR code and backup codes.

        Args:
            principal: Authenticated current user.
        Returns:
            TwoFactorSetupResponse: Material shown to the user once.
        Assumptions:
            Rejected while 2FA is enabled.
        Raises:
            HTTPException: 4xx payload on policy errors.
        Side Effects:
            Stores encrypted secret and backup-code digests.
        """
        try:
            result = start_use_case.start(
                user_id=principal.user_id,
                account_label=principal.account_label,
            )
        except TwoFactorOperationError as error:
            raise HTTPException(status_code=error.status_code, detail=error.payload()) from error
        return TwoFactorSetupResponse(
            secret=result.secret,
            otpauth_uri=result.uri,
            qr_code_data_url=result.qr_code_data_url,
            backup_codes=list(result.backup_codes),
        )

    @router.post("/2fa/verify", response_model=TwoFactorEnabledResponse)
    def post_two_factor_verify(
        request: TwoFactorCodeRequest,
        principal: CurrentUserPrincipal = Depends(current_user_dependency),
    ) -> TwoFactorEnabledResponse:
        """
        Confirm enrollment with the first TOTP code.

        Args:
            request: Submitted TOTP code.
            principal: Authenticated current user.
        Returns:
            TwoFactorEnabledResponse: `enabled=true`.
        Assumptions:
            Setup ran first.
        Raises:
            HTTPException: 4xx payload on policy or code errors.
        Side Effects:
            Enables 2FA on success.
        """
        try:
            result = confirm_use_case.confirm(
                user_id=principal.user_id,
                account_label=principal.account_label,
                code=request.code,
            )
        except TwoFactorOperationError as error:
            raise HTTPException(status_code=error.status_code, detail=error.payload()) from error
        return TwoFactorEnabledResponse(enabled=result.enabled)

    @router.post("/2fa/challenge", response_model=TwoFactorChallengeResponse)
    def post_two_factor_challenge(
        request: TwoFactorProofRequest,
        principal: CurrentUserPrincipal = Depends(current_user_dependency),
    ) -> TwoFactorChallengeResponse:
        """
        Check the login second factor.

        Args:
            request: TOTP code or backup code.
            principal: User completing login.
        Returns:
            TwoFactorChallengeResponse: Method used and backup codes left.
        Assumptions:
            Exactly one proof is present.
        Raises:
            HTTPException: 4xx payload on policy or code errors.
        Side Effects:
            Consumes a backup code when one is used.
        """
        try:
            result = challenge_use_case.verify(
                user_id=principal.user_id,
                account_label=principal.account_label,
                code=request.code,
                backup_code=request.backup_code,
            )
        except TwoFactorOperationError as error:
            raise HTTPException(status_code=error.status_code, detail=error.payload()) from error
        return TwoFactorChallengeResponse(
            verified=True,
            method=result.method.value,
            remaining_backup_codes=result.remaining_backup_codes,
        )

    @router.post("/2fa/disable", response_model=TwoFactorEnabledResponse)
    def post_two_factor_disable(
        request: TwoFactorProofRequest,
        principal: CurrentUserPrincipal = Depends(current_user_dependency),
    ) -> TwoFactorEnabledResponse:
        """
        Disable 2FA after a fresh second-factor proof.

        Args:
            request: TOTP code or backup code.
            principal: Authenticated current user.
        Returns:
            TwoFactorEnabledResponse: `enabled=false`.
        Assumptions:
            Pending enrollments are dropped without proof.
        Raises:
            HTTPException: 4xx payload on policy or code errors.
        Side Effects:
            Deletes the enrollment.
        """
        try:
            result = disable_use_case.disable(
                user_id=principal.user_id,
                account_label=principal.account_label,
                code=request.code,
                backup_code=request.backup_code,
            )
        except TwoFactorOperationError as error:
            raise HTTPException(status_code=error.status_code, detail=error.payload()) from error
        return TwoFactorEnabledResponse(enabled=result.enabled)

    @router.get("/2fa/backup-codes", response_model=BackupCodesStatusResponse)
    def get_backup_codes_status(
        principal: CurrentUserPrincipal = Depends(current_user_dependency),
    ) -> BackupCodesStatusResponse:
        try:
            result = status_use_case.status(user_id=principal.user_id)
        except TwoFactorOperationError as error:
            raise HTTPException(status_code=error.status_code, detail=error.payload()) from error
        return BackupCodesStatusResponse(
            remaining=result.remaining,
            total=result.total,
            warning_threshold=result.warning_threshold,
            needs_regeneration=result.needs_regeneration,
        )

    @router.post("/2fa/backup-codes", response_model=BackupCodesResponse)
    def post_backup_codes_regenerate(
        request: TwoFactorCodeRequest,
        principal: CurrentUserPrincipal = Depends(current_user_dependency),
    ) -> BackupCodesResponse:
        """
        Replace all backup codes after a TOTP check.

        Args:
            request: Submitted TOTP code.
            principal: Authenticated current user.
        Returns:
            BackupCodesResponse: New plaintext codes, shown once.
        Assumptions:
            Backup codes cannot authorize regeneration.
        Raises:
            HTTPException: 4xx payload on policy or code errors.
        Side Effects:
            Invalidates all previous backup codes.
        """
        try:
            result = regenerate_use_case.regenerate(
                user_id=principal.user_id,
                account_label=principal.account_label,
                code=request.code,
            )
        except TwoFactorOperationError as error:
            raise HTTPException(status_code=error.status_code, detail=error.payload()) from error
        return BackupCodesResponse(backup_codes=list(result.backup_codes))

    return router
