from __future__ import annotations

import re
from dataclasses import dataclass
from uuid import UUID

_CANONICAL_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class UserId:
    """
    UserId — CRM user identifier shared by 2FA storage, use-cases and request principals.

    Related:
      - src/freecrm/contexts/two_factor/domain/entities/two_factor_enrollment.py
      - src/freecrm/contexts/two_factor/adapters/inbound/api/deps/current_user.py
    """

    value: UUID

    def __post_init__(self) -> None:
        if not isinstance(self.value, UUID):
            raise ValueError(f"UserId requires UUID value, got {self.value!r}")

    @classmethod
    def from_string(cls, raw_value: str) -> UserId:
        """
        Parse a user id supplied by an upstream identity provider.

        Args:
            raw_value: Hyphenated UUID string, any case, optional surrounding whitespace.
        Returns:
            UserId: Parsed identifier.
        Assumptions:
            Only the canonical 8-4-4-4-12 form is accepted; braces, `urn:uuid:` prefixes and
            bare hex are rejected so one user never maps to two storage keys.
        Raises:
            ValueError: If value is empty or not a canonical UUID.
        Side Effects:
            None.
        """
        stripped = raw_value.strip()
        if not stripped:
            raise ValueError("UserId.from_string requires non-empty value")
        if _CANONICAL_UUID_PATTERN.fullmatch(stripped) is None:
            raise ValueError(f"UserId.from_string requires canonical UUID, got {stripped!r}")
        return cls(UUID(stripped))

    def __str__(self) -> str:
        return str(self.value)
