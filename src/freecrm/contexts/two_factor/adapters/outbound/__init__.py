from .persistence import InMemoryTwoFactorRepository
from .qr import QrCodePngDataUrlRenderer
from .security import (
    PyOtpTotpEngine,
    PyOtpTotpSecretGenerator,
    ScryptAesTwoFactorSecretCipher,
    Sha256BackupCodeManager,
    StandardOtpAuthUriBuilder,
)
from .time import SystemTwoFactorClock

__all__ = [
    "InMemoryTwoFactorRepository",
    "PyOtpTotpEngine",
    "PyOtpTotpSecretGenerator",
    "QrCodePngDataUrlRenderer",
    "ScryptAesTwoFactorSecretCipher",
    "Sha256BackupCodeManager",
    "StandardOtpAuthUriBuilder",
    "SystemTwoFactorClock",
]
