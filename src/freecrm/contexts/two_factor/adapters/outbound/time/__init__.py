from .system_two_factor_clock import SystemTwoFactorClock

__all__ = ["SystemTwoFactorClock"]
