"""
Composition helpers for the two-factor authentication API module.

Docs: docs/architecture/two_factor/two-factor-totp-policy-v1.md
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fastapi import APIRouter

from freecrm.contexts.two_factor.adapters.inbound.api.deps import (
    CurrentUserDependency,
    TrustedHeaderCurrentUserDependency,
)
from freecrm.contexts.two_factor.adapters.inbound.api.routes import build_two_factor_router
from freecrm.contexts.two_factor.adapters.outbound import (
    InMemoryTwoFactorRepository,
    PyOtpTotpEngine,
    PyOtpTotpSecretGenerator,
    QrCodePngDataUrlRenderer,
    ScryptAesTwoFactorSecretCipher,
    Sha256BackupCodeManager,
    StandardOtpAuthUriBuilder,
    SystemTwoFactorClock,
)
from freecrm.contexts.two_factor.application.ports import TwoFactorClock, TwoFactorRepository
from freecrm.contexts.two_factor.application.use_cases import (
    ConfirmTwoFactorEnrollmentUseCase,
    DisableTwoFactorUseCase,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesUseCase,
    SecondFactorProofVerifier,
    SetupTwoFactorUseCase,
    StartTwoFactorEnrollmentUseCase,
    VerifyTwoFactorChallengeUseCase,
)
from freecrm.platform.config import TwoFactorRuntimeConfig, load_two_factor_runtime_config


@dataclass(frozen=True, slots=True)
class TwoFactorApiModule:
    """
    TwoFactorApiModule — wired 2FA router plus the shared repository for host-side checks.

    Related:
      - apps/api/main/app.py
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
    """

    router: APIRouter
    repository: TwoFactorRepository
    config: TwoFactorRuntimeConfig


def build_two_factor_api_module(
    *,
    environ: Mapping[str, str],
    current_user_dependency: CurrentUserDependency | None = None,
    repository: TwoFactorRepository | None = None,
    clock: TwoFactorClock | None = None,
) -> TwoFactorApiModule:
    """
    Build fully wired 2FA module from environment settings.

    Args:
        environ: Runtime environment mapping.
        current_user_dependency: Host principal dependency; trusted headers when omitted.
        repository: Enrollment storage; in-memory when omitted.
        clock: Time source; system UTC clock when omitted.
    Returns:
        TwoFactorApiModule: Router, repository and resolved config.
    Assumptions:
        Config fail-fast policy runs before any adapter is built.
    Raises:
        ValueError: If config is invalid or fail-fast requires a missing encryption key.
    Side Effects:
        Reads optional YAML config and derives the cipher key once.
    """
    config = load_two_factor_runtime_config(environ=environ)
    effective_clock = SystemTwoFactorClock() if clock is None else clock
    effective_repository = InMemoryTwoFactorRepository() if repository is None else repository
    effective_dependency = (
        TrustedHeaderCurrentUserDependency()
        if current_user_dependency is None
        else current_user_dependency
    )

    secret_cipher = ScryptAesTwoFactorSecretCipher(
        encryption_key=config.encryption_key,
        kdf_salt=config.kdf_salt_bytes,
    )
    totp_engine = PyOtpTotpEngine(clock=effective_clock, valid_window=config.valid_window)
    backup_codes = Sha256BackupCodeManager()
    setup = SetupTwoFactorUseCase(
        secret_generator=PyOtpTotpSecretGenerator(),
        uri_builder=StandardOtpAuthUriBuilder(),
        qr_renderer=QrCodePngDataUrlRenderer(),
        issuer=config.issuer,
    )
    proof_verifier = SecondFactorProofVerifier(
        repository=effective_repository,
        secret_cipher=secret_cipher,
        totp_engine=totp_engine,
        backup_codes=backup_codes,
        clock=effective_clock,
    )

    router = build_two_factor_router(
        start_use_case=StartTwoFactorEnrollmentUseCase(
            setup=setup,
            backup_codes=backup_codes,
            secret_cipher=secret_cipher,
            repository=effective_repository,
            clock=effective_clock,
        ),
        confirm_use_case=ConfirmTwoFactorEnrollmentUseCase(
            repository=effective_repository,
            secret_cipher=secret_cipher,
            totp_engine=totp_engine,
            clock=effective_clock,
        ),
        challenge_use_case=VerifyTwoFactorChallengeUseCase(proof_verifier=proof_verifier),
        disable_use_case=DisableTwoFactorUseCase(
            repository=effective_repository,
            proof_verifier=proof_verifier,
        ),
        regenerate_use_case=RegenerateBackupCodesUseCase(
            repository=effective_repository,
            backup_codes=backup_codes,
            proof_verifier=proof_verifier,
            clock=effective_clock,
        ),
        status_use_case=GetBackupCodesStatusUseCase(
            repository=effective_repository,
            warning_threshold=config.backup_code_warning_threshold,
        ),
        current_user_dependency=effective_dependency,
    )
    return TwoFactorApiModule(
        router=router,
        repository=effective_repository,
        config=config,
    )
