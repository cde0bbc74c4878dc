from .entities import TwoFactorEnrollment, TwoFactorEnrollmentState
from .value_objects import (
    BACKUP_CODE_COUNT,
    BackupCodes,
    EncryptedSecret,
    EncryptedSecretFormat,
)

__all__ = [
    "BACKUP_CODE_COUNT",
    "BackupCodes",
    "EncryptedSecret",
    "EncryptedSecretFormat",
    "TwoFactorEnrollment",
    "TwoFactorEnrollmentState",
]
