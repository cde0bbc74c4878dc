from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TwoFactorClock(Protocol):
    """
    TwoFactorClock — port of the current time for TOTP computation and enrollment timestamps.

    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/time/system_two_factor_clock.py
      - src/freecrm/contexts/two_factor/adapters/outbound/security/two_factor/
        pyotp_totp_engine.py
    """

    def now(self) -> datetime:
        """
        Return current UTC timestamp.

        Args:
            None.
        Returns:
            datetime: Timezone-aware UTC datetime.
        Assumptions:
            Implementations follow wall-clock time closely enough for a ±30s TOTP window.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
