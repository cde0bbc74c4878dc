from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from typing import Sequence

from freecrm.contexts.two_factor.application.ports.backup_code_manager import BackupCodeManager
from freecrm.contexts.two_factor.application.ports.totp_secret_generator import (
    TwoFactorGenerationError,
)
from freecrm.contexts.two_factor.domain.value_objects import BACKUP_CODE_COUNT, BackupCodes

_GROUP_BYTES = 2
_CANONICAL_PATTERN = re.compile(r"[0-9A-F]{8}")


class Sha256BackupCodeManager(BackupCodeManager):
    """
    Sha256BackupCodeManager — `XXXX-XXXX` hex recovery codes stored as SHA-256 digests.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/backup_code_manager.py
      - src/freecrm/contexts/two_factor/domain/value_objects/backup_codes.py
      - src/freecrm/contexts/two_factor/application/use_cases/regenerate_backup_codes.py
    """

    def generate_backup_codes(self) -> BackupCodes:
        """
        Generate ten unique codes and their digests.

        Args:
            None.
        Returns:
            BackupCodes: Plaintext `XXXX-XXXX` codes with index-aligned digests.
        Assumptions:
            Uniqueness is guaranteed within the batch only; a colliding draw is redrawn.
        Raises:
            TwoFactorGenerationError: If the OS random source is unavailable.
        Side Effects:
            Reads OS CSPRNG.
        """
        codes: list[str] = []
        while len(codes) < BACKUP_CODE_COUNT:
            code = _random_code()
            if code not in codes:
                codes.append(code)
        return BackupCodes(
            codes=tuple(codes),
            hashed_codes=tuple(self.hash_backup_code(code) for code in codes),
        )

    def hash_backup_code(self, code: str) -> str:
        """
        Hash code after removing dashes and uppercasing.

        Args:
            code: Plaintext code.
        Returns:
            str: 64-character lowercase SHA-256 hex digest.
        Assumptions:
            Canonicalization makes hashing case- and dash-insensitive.
        Raises:
            None.
        Side Effects:
            None.
        """
        canonical = _canonicalize(code=code)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def verify_backup_code(self, *, candidate: str, hashed_codes: Sequence[str]) -> int | None:
        """
        Find index of the digest matching `candidate`.

        Args:
            candidate: User-submitted code.
            hashed_codes: Stored digests.
        Returns:
            int | None: Matching index, or `None`.
        Assumptions:
            Candidates that are not eight hex characters after canonicalization cannot
            match and are rejected before hashing.
        Raises:
            None.
        Side Effects:
            None.
        """
        canonical = _canonicalize(code=candidate.strip())
        if _CANONICAL_PATTERN.fullmatch(canonical) is None:
            return None

        candidate_digest = self.hash_backup_code(canonical).encode("ascii")
        for index, stored_digest in enumerate(hashed_codes):
            if hmac.compare_digest(candidate_digest, stored_digest.encode("ascii")):
                return index
        return None

    def remove_used_backup_code(
        self,
        *,
        hashed_codes: Sequence[str],
        index: int,
    ) -> tuple[str, ...]:
        """
        Return digests without the consumed entry.

        Args:
            hashed_codes: Stored digests.
            index: Position of the consumed digest.
        Returns:
            tuple[str, ...]: New sequence of length `len(hashed_codes) - 1`.
        Assumptions:
            Input sequence is left untouched.
        Raises:
            ValueError: If index is outside `[0, len(hashed_codes))`.
        Side Effects:
            None.
        """
        if index < 0 or index >= len(hashed_codes):
            raise ValueError(
                f"backup code index {index} out of range for {len(hashed_codes)} codes"
            )
        return tuple(digest for position, digest in enumerate(hashed_codes) if position != index)


def _random_code() -> str:
    try:
        first = secrets.token_hex(_GROUP_BYTES)
        second = secrets.token_hex(_GROUP_BYTES)
    except (OSError, NotImplementedError) as error:
        raise TwoFactorGenerationError("secure random source is unavailable") from error
    return f"{first.upper()}-{second.upper()}"


def _canonicalize(*, code: str) -> str:
    return code.replace("-", "").upper()
