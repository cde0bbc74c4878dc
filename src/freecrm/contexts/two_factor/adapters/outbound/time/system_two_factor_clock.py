from __future__ import annotations

from datetime import datetime, timezone

from freecrm.contexts.two_factor.application.ports.clock import TwoFactorClock


class SystemTwoFactorClock(TwoFactorClock):
    """
    SystemTwoFactorClock — wall-clock UTC time source for TOTP steps and enrollment timestamps.

    Related:
      - src/freecrm/contexts/two_factor/application/ports/clock.py
      - apps/api/wiring/modules/two_factor.py
    """

    def now(self) -> datetime:
        """
        Return current timezone-aware UTC datetime.

        Args:
            None.
        Returns:
            datetime: Current UTC datetime.
        Assumptions:
            Host clock is NTP-synchronized; the TOTP window only absorbs about 30 seconds.
        Raises:
            None.
        Side Effects:
            Reads system wall clock.
        """
        return datetime.now(timezone.utc)
