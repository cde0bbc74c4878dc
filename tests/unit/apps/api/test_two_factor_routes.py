from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.api.common import register_api_error_handlers
from apps.api.wiring.modules import build_two_factor_api_module
from freecrm.contexts.two_factor.adapters.outbound.persistence.in_memory import (
    InMemoryTwoFactorRepository,
)
from freecrm.contexts.two_factor.application.ports.clock import TwoFactorClock
from freecrm.shared_kernel.primitives import UserId

_NOW = datetime(2026, 3, 4, 15, 0, 0, tzinfo=timezone.utc)
_USER_ID = "00000000-0000-0000-0000-000000000701"
_HEADERS = {"X-User-Id": _USER_ID, "X-User-Label": "carol@example.com"}


class _FixedClock(TwoFactorClock):
    """
    Deterministic UTC clock for 2FA route tests.
    """

    def __init__(self, *, now_value: datetime) -> None:
        self._now_value = now_value

    def now(self) -> datetime:
        return self._now_value


def _environ(*, encryption_key: str = "route-test-encryption-key") -> dict[str, str]:
    return {
        "FREECRM_ENV": "test",
        "FREECRM_TWO_FACTOR_CONFIG": "/nonexistent/two_factor.yaml",
        "TWO_FACTOR_ENCRYPTION_KEY": encryption_key,
    }


def _build_client(
    *,
    repository: InMemoryTwoFactorRepository | None = None,
    encryption_key: str = "route-test-encryption-key",
) -> TestClient:
    """
    Build test client with 2FA router, shared handlers and deterministic clock.

    Args:
        repository: Optional shared storage.
        encryption_key: Secret encryption passphrase.
    Returns:
        TestClient: Client bound to a fresh app.
    Assumptions:
        Principal comes from trusted `X-User-*` headers.
    Raises:
        None.
    Side Effects:
        None.
    """
    module = build_two_factor_api_module(
        environ=_environ(encryption_key=encryption_key),
        repository=repository,
        clock=_FixedClock(now_value=_NOW),
    )
    app = FastAPI()
    register_api_error_handlers(app=app)
    app.include_router(module.router)
    return TestClient(app)


def _enable(client: TestClient) -> dict[str, Any]:
    setup = client.post("/2fa/setup", headers=_HEADERS)
    assert setup.status_code == 200
    payload = setup.json()
    verify = client.post(
        "/2fa/verify",
        headers=_HEADERS,
        json={"code": _build_totp_code(secret=str(payload["secret"]))},
    )
    assert verify.status_code == 200
    return payload


def test_two_factor_routes_require_authenticated_principal() -> None:
    client = _build_client()

    missing = client.post("/2fa/setup")
    invalid = client.get("/2fa/backup-codes", headers={"X-User-Id": "not-a-uuid"})

    for response in (missing, invalid):
        assert response.status_code == 401
        assert response.json() == {
            "detail": {"error": "unauthorized", "message": "Authentication required."}
        }


def test_setup_returns_enrollment_material() -> None:
    """
    Verify `/2fa/setup` returns secret, otpauth URI, QR data URL and ten backup codes.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Issuer defaults to `Free CRM` when config file is absent.
    Raises:
        AssertionError: If response payload differs.
    Side Effects:
        None.
    """
    client = _build_client()

    response = client.post("/2fa/setup", headers=_HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert set(payload) == {"secret", "otpauth_uri", "qr_code_data_url", "backup_codes"}
    assert payload["otpauth_uri"].startswith("otpauth://totp/Free%20CRM:carol%40example.com?")
    assert f"secret={payload['secret']}" in payload["otpauth_uri"]
    assert payload["qr_code_data_url"].startswith("data:image/png;base64,")
    assert len(payload["backup_codes"]) == 10


def test_setup_uses_user_id_as_label_when_label_header_is_absent() -> None:
    client = _build_client()

    response = client.post("/2fa/setup", headers={"X-User-Id": _USER_ID})

    assert response.status_code == 200
    assert f"Free%20CRM:{_USER_ID}?" in response.json()["otpauth_uri"]


def test_verify_rejects_wrong_code_then_enables_and_blocks_second_setup() -> None:
    """
    Verify 422 on a wrong code, 200 on a valid one, then 409 for re-setup and re-verify.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Error payloads are wrapped in FastAPI `detail`.
    Raises:
        AssertionError: If status codes or payloads differ.
    Side Effects:
        None.
    """
    client = _build_client()
    secret = client.post("/2fa/setup", headers=_HEADERS).json()["secret"]
    valid_code = _build_totp_code(secret=secret)
    wrong_code = "000000" if valid_code != "000000" else "999999"

    wrong = client.post("/2fa/verify", headers=_HEADERS, json={"code": wrong_code})
    ok = client.post("/2fa/verify", headers=_HEADERS, json={"code": valid_code})
    again = client.post("/2fa/setup", headers=_HEADERS)

    assert wrong.status_code == 422
    assert wrong.json() == {
        "detail": {
            "error": "invalid_two_factor_code",
            "message": "Invalid two-factor authentication code.",
        }
    }
    assert ok.status_code == 200
    assert ok.json() == {"enabled": True}
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "two_factor_already_enabled"


def test_verify_without_setup_returns_setup_required() -> None:
    client = _build_client()

    response = client.post("/2fa/verify", headers=_HEADERS, json={"code": "123456"})

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "two_factor_setup_required"


def test_verify_requires_code_field() -> None:
    client = _build_client()

    response = client.post("/2fa/verify", headers=_HEADERS, json={})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "validation_error"
    assert detail["errors"][0]["path"] == "body.code"
    assert detail["errors"][0]["code"] == "required"


def test_challenge_accepts_backup_code_and_status_reports_remaining() -> None:
    """
    Verify backup-code challenge decrements the counter visible in the status endpoint.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Warning threshold defaults to 3.
    Raises:
        AssertionError: If challenge or status payloads differ.
    Side Effects:
        None.
    """
    client = _build_client()
    enrollment = _enable(client)
    backup_codes = list(enrollment["backup_codes"])

    challenge = client.post(
        "/2fa/challenge",
        headers=_HEADERS,
        json={"backup_code": str(backup_codes[0]).lower()},
    )
    reused = client.post("/2fa/challenge", headers=_HEADERS, json={"backup_code": backup_codes[0]})
    status = client.get("/2fa/backup-codes", headers=_HEADERS)

    assert challenge.status_code == 200
    assert challenge.json() == {
        "verified": True,
        "method": "backup_code",
        "remaining_backup_codes": 9,
    }
    assert reused.status_code == 422
    assert status.status_code == 200
    assert status.json() == {
        "remaining": 9,
        "total": 10,
        "warning_threshold": 3,
        "needs_regeneration": False,
    }


def test_challenge_with_totp_code_and_proof_required() -> None:
    client = _build_client()
    enrollment = _enable(client)
    code = _build_totp_code(secret=str(enrollment["secret"]))

    ok = client.post("/2fa/challenge", headers=_HEADERS, json={"code": code})
    neither = client.post("/2fa/challenge", headers=_HEADERS, json={})

    assert ok.json() == {"verified": True, "method": "totp", "remaining_backup_codes": 10}
    assert neither.status_code == 422
    assert neither.json() == {
        "detail": {
            "error": "two_factor_proof_required",
            "message": "Provide exactly one of a verification code or a backup code.",
        }
    }


def test_status_and_challenge_before_enable_return_not_enabled() -> None:
    client = _build_client()
    client.post("/2fa/setup", headers=_HEADERS)

    status = client.get("/2fa/backup-codes", headers=_HEADERS)
    challenge = client.post("/2fa/challenge", headers=_HEADERS, json={"code": "123456"})

    for response in (status, challenge):
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "two_factor_not_enabled"


def test_regenerate_backup_codes_requires_totp_code() -> None:
    client = _build_client()
    enrollment = _enable(client)
    old_codes = set(enrollment["backup_codes"])

    rejected = client.post("/2fa/backup-codes", headers=_HEADERS, json={"code": "000000x"})
    regenerated = client.post(
        "/2fa/backup-codes",
        headers=_HEADERS,
        json={"code": _build_totp_code(secret=str(enrollment["secret"]))},
    )

    assert rejected.status_code == 422
    assert regenerated.status_code == 200
    new_codes = regenerated.json()["backup_codes"]
    assert len(new_codes) == 10
    assert old_codes.isdisjoint(new_codes)


def test_disable_requires_proof_when_enabled() -> None:
    """
    Verify disable demands proof for an enabled enrollment and then clears it.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        After disable a new setup is allowed.
    Raises:
        AssertionError: If disable flow differs.
    Side Effects:
        None.
    """
    client = _build_client()
    enrollment = _enable(client)

    without_proof = client.post("/2fa/disable", headers=_HEADERS, json={})
    disabled = client.post(
        "/2fa/disable",
        headers=_HEADERS,
        json={"code": _build_totp_code(secret=str(enrollment["secret"]))},
    )
    second_disable = client.post("/2fa/disable", headers=_HEADERS, json={})
    setup_again = client.post("/2fa/setup", headers=_HEADERS)

    assert without_proof.status_code == 422
    assert without_proof.json()["detail"]["error"] == "two_factor_proof_required"
    assert disabled.status_code == 200
    assert disabled.json() == {"enabled": False}
    assert second_disable.status_code == 409
    assert setup_again.status_code == 200


def test_unreadable_secret_returns_500() -> None:
    """
    Verify a secret written under another encryption key yields a 500 without details.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Both apps share one repository but use different keys.
    Raises:
        AssertionError: If decryption failure leaks or maps to another status.
    Side Effects:
        None.
    """
    repository = InMemoryTwoFactorRepository()
    writer = _build_client(repository=repository, encryption_key="first-key")
    reader = _build_client(repository=repository, encryption_key="second-key")
    secret = writer.post("/2fa/setup", headers=_HEADERS).json()["secret"]

    response = reader.post(
        "/2fa/verify",
        headers=_HEADERS,
        json={"code": _build_totp_code(secret=secret)},
    )

    assert response.status_code == 500
    assert response.json() == {
        "detail": {
            "error": "two_factor_secret_unreadable",
            "message": "Two-factor secret could not be read.",
        }
    }
    stored = repository.find_by_user_id(user_id=UserId.from_string(_USER_ID))
    assert stored is not None and stored.enabled is False


def _build_totp_code(*, secret: str) -> str:
    """
    Build RFC 6238 code for `_NOW`.

    Args:
        secret: Base32 TOTP secret without padding.
    Returns:
        str: Six-digit code.
    Assumptions:
        HMAC-SHA1, 30-second period.
    Raises:
        ValueError: If secret cannot be decoded as base32.
    Side Effects:
        None.
    """
    padding = "=" * ((8 - (len(secret) % 8)) % 8)
    key = base64.b32decode(f"{secret}{padding}", casefold=True)
    counter = int(_NOW.timestamp()) // 30
    digest = hmac.new(key, counter.to_bytes(8, byteorder="big"), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    binary_code = int.from_bytes(digest[offset : offset + 4], byteorder="big") & 0x7FFFFFFF
    return f"{binary_code % 1_000_000:06d}"
