from .two_factor import (
    PyOtpTotpEngine,
    PyOtpTotpSecretGenerator,
    ScryptAesTwoFactorSecretCipher,
    Sha256BackupCodeManager,
    StandardOtpAuthUriBuilder,
)

__all__ = [
    "PyOtpTotpEngine",
    "PyOtpTotpSecretGenerator",
    "ScryptAesTwoFactorSecretCipher",
    "Sha256BackupCodeManager",
    "StandardOtpAuthUriBuilder",
]
