from __future__ import annotations

from dataclasses import dataclass

BACKUP_CODE_COUNT = 10


@dataclass(frozen=True, slots=True)
class BackupCodes:
    """
    BackupCodes — one freshly generated batch of single-use recovery codes.

    `codes` holds the plaintext shown to the user exactly once; `hashed_codes` holds the
    digests that are persisted. Both are index-aligned.

    Related:
      - src/freecrm/contexts/two_factor/application/ports/backup_code_manager.py
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        sha256_backup_code_manager.py
    """

    codes: tuple[str, ...]
    hashed_codes: tuple[str, ...]

    def __post_init__(self) -> None:
        """
        Validate batch size and alignment of plaintext and digest sequences.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Codes are unique within one batch.
        Raises:
            ValueError: If sizes differ from `BACKUP_CODE_COUNT` or codes repeat.
        Side Effects:
            Normalizes both sequences to tuples.
        """
        object.__setattr__(self, "codes", tuple(self.codes))
        object.__setattr__(self, "hashed_codes", tuple(self.hashed_codes))
        if len(self.codes) != BACKUP_CODE_COUNT:
            raise ValueError(
                f"BackupCodes.codes must contain {BACKUP_CODE_COUNT} entries, "
                f"got {len(self.codes)}"
            )
        if len(self.hashed_codes) != len(self.codes):
            raise ValueError("BackupCodes.hashed_codes must align with codes")
        if len(set(self.codes)) != len(self.codes):
            raise ValueError("BackupCodes.codes must be unique within one batch")

    def __repr__(self) -> str:
        return f"BackupCodes(count={len(self.codes)})"
