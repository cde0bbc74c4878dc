from .ports import (
    BackupCodeManager,
    CurrentUserPrincipal,
    OtpAuthUriBuilder,
    QrCodeRenderer,
    SecretDecryptionError,
    TotpEngine,
    TotpSecretGenerator,
    TwoFactorClock,
    TwoFactorGenerationError,
    TwoFactorRepository,
    TwoFactorSecretCipher,
)
from .use_cases import (
    BackupCodesStatus,
    ConfirmTwoFactorEnrollmentUseCase,
    DisableTwoFactorUseCase,
    GetBackupCodesStatusUseCase,
    RegenerateBackupCodesUseCase,
    SecondFactorMethod,
    SecondFactorProofVerifier,
    SetupTwoFactorUseCase,
    StartTwoFactorEnrollmentUseCase,
    TwoFactorOperationError,
    TwoFactorSetupResult,
    VerifyTwoFactorChallengeUseCase,
)

__all__ = [
    "BackupCodeManager",
    "BackupCodesStatus",
    "ConfirmTwoFactorEnrollmentUseCase",
    "CurrentUserPrincipal",
    "DisableTwoFactorUseCase",
    "GetBackupCodesStatusUseCase",
    "OtpAuthUriBuilder",
    "QrCodeRenderer",
    "RegenerateBackupCodesUseCase",
    "SecondFactorMethod",
    "SecondFactorProofVerifier",
    "SecretDecryptionError",
    "SetupTwoFactorUseCase",
    "StartTwoFactorEnrollmentUseCase",
    "TotpEngine",
    "TotpSecretGenerator",
    "TwoFactorClock",
    "TwoFactorGenerationError",
    "TwoFactorOperationError",
    "TwoFactorRepository",
    "TwoFactorSecretCipher",
    "TwoFactorSetupResult",
    "VerifyTwoFactorChallengeUseCase",
]
