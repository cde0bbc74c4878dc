from __future__ import annotations

from typing import Callable

from fastapi import HTTPException
from starlette.requests import Request

from freecrm.contexts.two_factor.application.ports.current_user import CurrentUserPrincipal
from freecrm.shared_kernel.primitives import UserId

CurrentUserDependency = Callable[..., CurrentUserPrincipal]

_UNAUTHORIZED_DETAIL = {
    "error": "unauthorized",
    "message": "Authentication required.",
}


class TrustedHeaderCurrentUserDependency:
    """
    TrustedHeaderCurrentUserDependency — resolves the principal from headers set by an auth proxy.

    The CRM session layer sits in front of this service and forwards the authenticated
    user id and account label; requests without them are rejected with 401.

    Related:
      - src/freecrm/contexts/two_factor/application/ports/current_user.py
      - src/freecrm/contexts/two_factor/adapters/inbound/api/routes/two_factor.py
      - apps/api/wiring/modules/two_factor.py
    """

    def __init__(
        self,
        *,
        user_id_header: str = "X-User-Id",
        account_label_header: str = "X-User-Label",
    ) -> None:
        """
        Initialize dependency with header names.

        Args:
            user_id_header: Header carrying the user UUID.
            account_label_header: Header carrying the account label (email).
        Returns:
            None.
        Assumptions:
            Headers are stripped from client requests by the proxy.
        Raises:
            ValueError: If a header name is blank.
        Side Effects:
            None.
        """
        normalized_user_id_header = user_id_header.strip()
        normalized_label_header = account_label_header.strip()
        if not normalized_user_id_header:
            raise ValueError("TrustedHeaderCurrentUserDependency requires user_id_header")
        if not normalized_label_header:
            raise ValueError("TrustedHeaderCurrentUserDependency requires account_label_header")
        self._user_id_header = normalized_user_id_header
        self._account_label_header = normalized_label_header

    def __call__(self, request: Request) -> CurrentUserPrincipal:
        """
        Resolve principal from request headers.

        Args:
            request: FastAPI HTTP request.
        Returns:
            CurrentUserPrincipal: Authenticated user context.
        Assumptions:
            A missing label falls back to the user id.
        Raises:
            HTTPException: 401 when the user id is absent or not a UUID.
        Side Effects:
            None.
        """
        raw_user_id = request.headers.get(self._user_id_header, "").strip()
        if not raw_user_id:
            raise HTTPException(status_code=401, detail=dict(_UNAUTHORIZED_DETAIL))
        try:
            user_id = UserId.from_string(raw_user_id)
        except ValueError as error:
            raise HTTPException(status_code=401, detail=dict(_UNAUTHORIZED_DETAIL)) from error

        account_label = request.headers.get(self._account_label_header, "").strip()
        return CurrentUserPrincipal(
            user_id=user_id,
            account_label=account_label or str(user_id),
        )
