from .backup_code_manager import BackupCodeManager
from .clock import TwoFactorClock
from .current_user import CurrentUserPrincipal
from .otpauth_uri_builder import OtpAuthUriBuilder
from .qr_code_renderer import QrCodeRenderer
from .totp_engine import TotpEngine
from .totp_secret_generator import TotpSecretGenerator, TwoFactorGenerationError
from .two_factor_repository import TwoFactorRepository
from .two_factor_secret_cipher import SecretDecryptionError, TwoFactorSecretCipher

__all__ = [
    "BackupCodeManager",
    "CurrentUserPrincipal",
    "OtpAuthUriBuilder",
    "QrCodeRenderer",
    "SecretDecryptionError",
    "TotpEngine",
    "TotpSecretGenerator",
    "TwoFactorClock",
    "TwoFactorGenerationError",
    "TwoFactorRepository",
    "TwoFactorSecretCipher",
]
