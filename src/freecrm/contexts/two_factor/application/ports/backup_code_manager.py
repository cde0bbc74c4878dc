from __future__ import annotations

from typing import Protocol, Sequence

from freecrm.contexts.two_factor.domain.value_objects import BackupCodes


class BackupCodeManager(Protocol):
    """
    BackupCodeManager — port for single-use recovery code generation and bookkeeping.

    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        sha256_backup_code_manager.py
      - src/freecrm/contexts/two_factor/application/use_cases/verify_two_factor_challenge.py
    """

    def generate_backup_codes(self) -> BackupCodes:
        """
        Generate one batch of plaintext codes with their storage digests.

        Args:
            None.
        Returns:
            BackupCodes: Ten `XXXX-XXXX` codes and index-aligned digests.
        Assumptions:
            Plaintext codes are returned to the user once and never stored.
        Raises:
            TwoFactorGenerationError: If the random source is unavailable.
        Side Effects:
            Reads OS CSPRNG.
        """
        ...

    def hash_backup_code(self, code: str) -> str:
        """
        Hash a code after case and dash canonicalization.

        Args:
            code: Plaintext code in any case, with or without dashes.
        Returns:
            str: Fixed-length hex digest.
        Assumptions:
            `hash("abcd-1234") == hash("ABCD1234")`.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...

    def verify_backup_code(self, *, candidate: str, hashed_codes: Sequence[str]) -> int | None:
        """
        Find the stored digest matching a submitted code.

        Args:
            candidate: User-submitted code.
            hashed_codes: Stored digests.
        Returns:
            int | None: Index of the matching digest, or `None` when nothing matches.
        Assumptions:
            The caller removes the matched digest before accepting the code.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...

    def remove_used_backup_code(
        self,
        *,
        hashed_codes: Sequence[str],
        index: int,
    ) -> tuple[str, ...]:
        """
        Return a copy of `hashed_codes` without the entry at `index`.

        Args:
            hashed_codes: Stored digests.
            index: Position of the consumed digest.
        Returns:
            tuple[str, ...]: New digest sequence one entry shorter.
        Assumptions:
            Input sequence is never mutated.
        Raises:
            ValueError: If index is out of range.
        Side Effects:
            None.
        """
        ...
