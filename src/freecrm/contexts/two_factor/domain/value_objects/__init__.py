from .backup_codes import BACKUP_CODE_COUNT, BackupCodes
from .encrypted_secret import EncryptedSecret, EncryptedSecretFormat

__all__ = [
    "BACKUP_CODE_COUNT",
    "BackupCodes",
    "EncryptedSecret",
    "EncryptedSecretFormat",
]
