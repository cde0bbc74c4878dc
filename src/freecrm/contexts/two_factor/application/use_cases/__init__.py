from .confirm_two_factor_enrollment import (
    ConfirmTwoFactorEnrollmentResult,
    ConfirmTwoFactorEnrollmentUseCase,
)
from .disable_two_factor import DisableTwoFactorResult, DisableTwoFactorUseCase
from .get_backup_codes_status import BackupCodesStatus, GetBackupCodesStatusUseCase
from .regenerate_backup_codes import RegenerateBackupCodesResult, RegenerateBackupCodesUseCase
from .second_factor_proof import SecondFactorMethod, SecondFactorProofVerifier
from .setup_two_factor import SetupTwoFactorUseCase, TwoFactorSetupResult
from .start_two_factor_enrollment import (
    StartTwoFactorEnrollmentResult,
    StartTwoFactorEnrollmentUseCase,
)
from .two_factor_errors import (
    TwoFactorAlreadyEnabledError,
    TwoFactorInvalidCodeError,
    TwoFactorNotEnabledError,
    TwoFactorOperationError,
    TwoFactorProofRequiredError,
    TwoFactorSetupRequiredError,
)
from .verify_two_factor_challenge import (
    VerifyTwoFactorChallengeResult,
    VerifyTwoFactorChallengeUseCase,
)

__all__ = [
    "BackupCodesStatus",
    "ConfirmTwoFactorEnrollmentResult",
    "ConfirmTwoFactorEnrollmentUseCase",
    "DisableTwoFactorResult",
    "DisableTwoFactorUseCase",
    "GetBackupCodesStatusUseCase",
    "RegenerateBackupCodesResult",
    "RegenerateBackupCodesUseCase",
    "SecondFactorMethod",
    "SecondFactorProofVerifier",
    "SetupTwoFactorUseCase",
    "StartTwoFactorEnrollmentResult",
    "StartTwoFactorEnrollmentUseCase",
    "TwoFactorAlreadyEnabledError",
    "TwoFactorInvalidCodeError",
    "TwoFactorNotEnabledError",
    "TwoFactorOperationError",
    "TwoFactorProofRequiredError",
    "TwoFactorSetupRequiredError",
    "TwoFactorSetupResult",
    "VerifyTwoFactorChallengeResult",
    "VerifyTwoFactorChallengeUseCase",
]
