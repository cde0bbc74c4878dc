from .otpauth_uri_builder import StandardOtpAuthUriBuilder
from .pyotp_secret_generator import PyOtpTotpSecretGenerator
from .pyotp_totp_engine import PyOtpTotpEngine
from .scrypt_aes_secret_cipher import ScryptAesTwoFactorSecretCipher, derive_secret_key
from .sha256_backup_code_manager import Sha256BackupCodeManager

__all__ = [
    "PyOtpTotpEngine",
    "PyOtpTotpSecretGenerator",
    "ScryptAesTwoFactorSecretCipher",
    "Sha256BackupCodeManager",
    "StandardOtpAuthUriBuilder",
    "derive_secret_key",
]
