from __future__ import annotations

import binascii
import hashlib
import hmac
import re
from datetime import datetime

import pyotp

from freecrm.contexts.two_factor.application.ports.clock import TwoFactorClock
from freecrm.contexts.two_factor.application.ports.totp_engine import TotpEngine

_TOTP_DIGITS = 6
_TOTP_PERIOD_SECONDS = 30
_DEFAULT_VALID_WINDOW = 1
_CANDIDATE_PATTERN = re.compile(r"[0-9]{6}")


class PyOtpTotpEngine(TotpEngine):
    """
    PyOtpTotpEngine — RFC 6238 (HMAC-SHA1, 30s, 6 digits) engine built on `pyotp.TOTP`.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/totp_engine.py
      - src/freecrm/contexts/two_factor/application/ports/clock.py
      - src/freecrm/contexts/two_factor/application/use_cases/verify_two_factor_challenge.py
    """

    def __init__(self, *, clock: TwoFactorClock, valid_window: int = _DEFAULT_VALID_WINDOW) -> None:
        """
        Initialize engine with time source and drift tolerance.

        Args:
            clock: UTC time source.
            valid_window: Number of 30-second steps accepted before and after now.
        Returns:
            None.
        Assumptions:
            Default window of one step absorbs roughly 30 seconds of clock drift.
        Raises:
            ValueError: If clock is missing or window is negative.
        Side Effects:
            None.
        """
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("PyOtpTotpEngine requires clock")
        if valid_window < 0:
            raise ValueError("PyOtpTotpEngine valid_window must be >= 0")
        self._clock = clock
        self._valid_window = valid_window

    def generate_current_token(self, *, secret: str, account_label: str) -> str:
        """
        Compute the code for the current time step.

        Args:
            secret: Base32 TOTP secret.
            account_label: Account label the secret was issued for.
        Returns:
            str: Six-digit zero-padded code.
        Assumptions:
            Clock returns timezone-aware UTC datetime.
        Raises:
            ValueError: If secret is not valid Base32, label is empty, or clock is not UTC.
        Side Effects:
            None.
        """
        totp = _build_totp(secret=secret, account_label=account_label)
        now = _ensure_utc_datetime(value=self._clock.now(), field_name="clock.now")
        return _code_at(totp=totp, at_time=now, counter_offset=0)

    def verify_token(self, *, secret: str, candidate: str, account_label: str) -> bool:
        """
        Verify a submitted code inside the configured drift window.

        Args:
            secret: Base32 TOTP secret.
            candidate: User-submitted code.
            account_label: Account label the secret was issued for.
        Returns:
            bool: `True` when any step in `[-valid_window, +valid_window]` matches.
        Assumptions:
            Candidates that are not exactly six ASCII digits are rejected before any
            HMAC is computed.
        Raises:
            ValueError: If secret is not valid Base32, label is empty, or clock is not UTC.
        Side Effects:
            None.
        """
        if _CANDIDATE_PATTERN.fullmatch(candidate) is None:
            return False

        totp = _build_totp(secret=secret, account_label=account_label)
        now = _ensure_utc_datetime(value=self._clock.now(), field_name="clock.now")
        matched = False
        for offset in range(-self._valid_window, self._valid_window + 1):
            expected = _code_at(totp=totp, at_time=now, counter_offset=offset)
            if hmac.compare_digest(expected.encode("ascii"), candidate.encode("ascii")):
                matched = True
        return matched


def _build_totp(*, secret: str, account_label: str) -> pyotp.TOTP:
    """
    Build `pyotp.TOTP` for validated secret and label.

    Args:
        secret: Base32 TOTP secret, padding optional.
        account_label: Non-empty account label.
    Returns:
        pyotp.TOTP: Configured TOTP instance.
    Assumptions:
        Label carries no cryptographic weight.
    Raises:
        ValueError: If label is empty or secret is not valid Base32.
    Side Effects:
        None.
    """
    normalized_label = account_label.strip()
    if not normalized_label:
        raise ValueError("PyOtpTotpEngine requires non-empty account_label")
    normalized_secret = secret.strip().upper().rstrip("=")
    if not normalized_secret:
        raise ValueError("PyOtpTotpEngine requires non-empty secret")

    totp = pyotp.TOTP(
        normalized_secret,
        digits=_TOTP_DIGITS,
        digest=hashlib.sha1,
        name=normalized_label,
        interval=_TOTP_PERIOD_SECONDS,
    )
    try:
        totp.byte_secret()
    except (binascii.Error, ValueError) as error:
        raise ValueError("PyOtpTotpEngine secret is not valid base32") from error
    return totp


def _code_at(*, totp: pyotp.TOTP, at_time: datetime, counter_offset: int) -> str:
    """
    Compute code for the step containing `at_time`, shifted by `counter_offset` steps.

    Args:
        totp: Configured TOTP instance.
        at_time: Timezone-aware UTC datetime.
        counter_offset: Step offset relative to `floor(unix / 30)`.
    Returns:
        str: Six-digit zero-padded code.
    Assumptions:
        Aware datetimes make pyotp derive the counter via `calendar.timegm`.
    Raises:
        ValueError: If resulting counter is negative.
    Side Effects:
        None.
    """
    if totp.timecode(at_time) + counter_offset < 0:
        raise ValueError("PyOtpTotpEngine counter must be non-negative")
    return totp.at(at_time, counter_offset=counter_offset)


def _ensure_utc_datetime(*, value: datetime, field_name: str) -> datetime:
    """
    Validate datetime is timezone-aware UTC and return same value.

    Args:
        value: Datetime value to validate.
        field_name: Field label for deterministic error message.
    Returns:
        datetime: Same validated datetime.
    Assumptions:
        UTC datetimes have zero offset.
    Raises:
        ValueError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None:
        raise ValueError(f"{field_name} must be timezone-aware UTC datetime")
    if offset.total_seconds() != 0:
        raise ValueError(f"{field_name} must be UTC datetime")
    return value
