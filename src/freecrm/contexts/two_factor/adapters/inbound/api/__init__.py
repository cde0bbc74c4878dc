from .deps import CurrentUserDependency, TrustedHeaderCurrentUserDependency
from .routes import (
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
    "CurrentUserDependency",
    "TrustedHeaderCurrentUserDependency",
    "TwoFactorChallengeResponse",
    "TwoFactorCodeRequest",
    "TwoFactorEnabledResponse",
    "TwoFactorProofRequest",
    "TwoFactorSetupResponse",
    "build_two_factor_router",
]
