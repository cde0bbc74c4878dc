from .two_factor import (
    BackupCodesResponse,
    BackupCodesStatusResponse,
    TwoFactorChallengeResponse,
    TwoFactorCodeRequest,
    TwoFactorEnabledResponse,
    TwoFactorProofRequest,
    TwoFactorSetupResponse,
    build_two_factor_router,
)

__all__ = [
    "BackupCodesResponse",
    "BackupCodesStatusResponse",
    "TwoFactorChallengeResponse",
    "TwoFactorCodeRequest",
    "TwoFactorEnabledResponse",
    "TwoFactorProofRequest",
    "TwoFactorSetupResponse",
    "build_two_factor_router",
]
