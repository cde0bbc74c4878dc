"""
Adapters package for the two-factor authentication context.
"""

from .inbound import TrustedHeaderCurrentUserDependency, build_two_factor_router
from .outbound import (
    InMemoryTwoFactorRepository,
    PyOtpTotpEngine,
    PyOtpTotpSecretGenerator,
    QrCodePngDataUrlRenderer,
    ScryptAesTwoFactorSecretCipher,
    Sha256BackupCodeManager,
    StandardOtpAuthUriBuilder,
    SystemTwoFactorClock,
)

__all__ = [
    "InMemoryTwoFactorRepository",
    "PyOtpTotpEngine",
    "PyOtpTotpSecretGenerator",
    "QrCodePngDataUrlRenderer",
    "ScryptAesTwoFactorSecretCipher",
    "Sha256BackupCodeManager",
    "StandardOtpAuthUriBuilder",
    "SystemTwoFactorClock",
    "TrustedHeaderCurrentUserDependency",
    "build_two_factor_router",
]
