from __future__ import annotations

from dataclasses import dataclass

from freecrm.shared_kernel.primitives import UserId


@dataclass(frozen=True, slots=True)
class CurrentUserPrincipal:
    """
    CurrentUserPrincipal — authenticated user context handed to 2FA endpoints by the host app.

    `account_label` is the label shown in authenticator apps (email, or user id when the
    account has no email).

    Related:
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
      - apps/api/wiring/modules/two_factor.py
    """

    user_id: UserId
    account_label: str

    def __post_init__(self) -> None:
        normalized_label = self.account_label.strip()
        if not normalized_label:
            raise ValueError("CurrentUserPrincipal.account_label must be non-empty")
        object.__setattr__(self, "account_label", normalized_label)
