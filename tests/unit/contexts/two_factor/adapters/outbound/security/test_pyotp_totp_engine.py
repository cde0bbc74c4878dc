from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from freecrm.contexts.two_factor.adapters.outbound.security.two_factor import PyOtpTotpEngine
from freecrm.contexts.two_factor.adapters.outbound.security.two_factor import (
    pyotp_totp_engine as engine_module,
)
from freecrm.contexts.two_factor.application.ports.clock import TwoFactorClock

# RFC 6238 Appendix B SHA-1 seed "12345678901234567890" in Base32.
_RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
_LABEL = "alice@example.com"


class _FixedClock(TwoFactorClock):
    """
    Deterministic clock returning one configured instant.
    """

    def __init__(self, *, now_value: datetime) -> None:
        self._now_value = now_value

    def now(self) -> datetime:
        return self._now_value


def _engine_at(*, unix_seconds: int, valid_window: int = 1) -> PyOtpTotpEngine:
    clock = _FixedClock(now_value=datetime.fromtimestamp(unix_seconds, tz=timezone.utc))
    return PyOtpTotpEngine(clock=clock, valid_window=valid_window)


@pytest.mark.parametrize(
    ("unix_seconds", "expected"),
    [
        (59, "287082"),
        (1111111109, "081804"),
        (1111111111, "050471"),
        (1234567890, "005924"),
        (2000000000, "279037"),
        (20000000000, "353130"),
    ],
)
def test_engine_matches_rfc_6238_sha1_vectors(unix_seconds: int, expected: str) -> None:
    """
    Verify generated codes equal the RFC 6238 SHA-1 vectors truncated to six digits.

    Args:
        unix_seconds: Vector timestamp.
        expected: Last six digits of the published eight-digit code.
    Returns:
        None.
    Assumptions:
        Six-digit codes are the eight-digit truncation taken `mod 10**6`.
    Raises:
        AssertionError: If generation or verification disagrees with the RFC.
    Side Effects:
        None.
    """
    engine = _engine_at(unix_seconds=unix_seconds)

    assert engine.generate_current_token(secret=_RFC_SECRET, account_label=_LABEL) == expected
    assert engine.verify_token(secret=_RFC_SECRET, candidate=expected, account_label=_LABEL)


def test_engine_accepts_previous_step_only_inside_window() -> None:
    """
    Verify drift tolerance covers one step and window zero covers none.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        `081804` belongs to the step right before the one containing 1111111111.
    Raises:
        AssertionError: If window bounds are not applied.
    Side Effects:
        None.
    """
    previous_step_code = "081804"

    assert _engine_at(unix_seconds=1111111111).verify_token(
        secret=_RFC_SECRET,
        candidate=previous_step_code,
        account_label=_LABEL,
    )
    assert not _engine_at(unix_seconds=1111111111, valid_window=0).verify_token(
        secret=_RFC_SECRET,
        candidate=previous_step_code,
        account_label=_LABEL,
    )
    assert not _engine_at(unix_seconds=1111111111 + 90).verify_token(
        secret=_RFC_SECRET,
        candidate=previous_step_code,
        account_label=_LABEL,
    )


def test_engine_rejects_code_of_another_secret() -> None:
    engine = _engine_at(unix_seconds=59)

    assert not engine.verify_token(
        secret="JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP",
        candidate="287082",
        account_label=_LABEL,
    )


def test_engine_accepts_lowercase_and_padded_secret() -> None:
    engine = _engine_at(unix_seconds=59)

    assert engine.verify_token(
        secret=_RFC_SECRET.lower() + "====",
        candidate="287082",
        account_label=_LABEL,
    )


@pytest.mark.parametrize(
    "candidate",
    ["", "12345", "1234567", "12345a", " 287082", "287082\n", "28-082", "２８７０８２"],
)
def test_engine_rejects_malformed_candidates_before_hashing(
    candidate: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """
    Verify malformed candidates return `False` without building a TOTP instance.

    Args:
        candidate: Candidate that is not exactly six ASCII digits.
        monkeypatch: Pytest monkeypatch fixture.
    Returns:
        None.
    Assumptions:
        Building a TOTP instance is the first step of any HMAC work.
    Raises:
        AssertionError: If a malformed candidate reaches pyotp or is accepted.
    Side Effects:
        None.
    """

    def _fail(*_args: object, **_kwargs: object) -> None:
        raise AssertionError("pyotp.TOTP must not be constructed for malformed candidates")

    monkeypatch.setattr(engine_module.pyotp, "TOTP", _fail)
    engine = _engine_at(unix_seconds=59)

    assert engine.verify_token(secret=_RFC_SECRET, candidate=candidate, account_label=_LABEL) is False


def test_engine_rejects_invalid_inputs_as_programmer_errors() -> None:
    engine = _engine_at(unix_seconds=59)

    with pytest.raises(ValueError, match="account_label"):
        engine.generate_current_token(secret=_RFC_SECRET, account_label="  ")
    with pytest.raises(ValueError, match="base32"):
        engine.verify_token(secret="not base32 !", candidate="123456", account_label=_LABEL)
    with pytest.raises(ValueError, match="valid_window"):
        PyOtpTotpEngine(clock=_FixedClock(now_value=datetime.now(timezone.utc)), valid_window=-1)


def test_engine_requires_utc_clock() -> None:
    clock = _FixedClock(now_value=datetime(2026, 1, 1, tzinfo=timezone(timedelta(hours=2))))
    engine = PyOtpTotpEngine(clock=clock)

    with pytest.raises(ValueError, match="clock.now must be UTC"):
        engine.generate_current_token(secret=_RFC_SECRET, account_label=_LABEL)
