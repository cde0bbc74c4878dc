from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, ConfigDict

from apps.api.common import register_api_error_handlers
from freecrm.contexts.two_factor.application.ports import (
    SecretDecryptionError,
    TwoFactorGenerationError,
)


class _ValidationPayload(BaseModel):
    """
    Validation payload model with deliberately non-lexicographic field order for sorting test.
    """

    model_config = ConfigDict(extra="forbid")

    b: int
    a: int


def _build_app() -> FastAPI:
    """
    Build app with shared handlers and endpoints raising each handled error.

    Args:
        None.
    Returns:
        FastAPI: Test application.
    Assumptions:
        Handlers are registered before routes are hit.
    Raises:
        None.
    Side Effects:
        None.
    """
    app = FastAPI()
    register_api_error_handlers(app=app)

    @app.get("/unreadable")
    def unreadable() -> None:
        raise SecretDecryptionError("Encrypted 2FA secret blob authentication failed")

    @app.get("/no-entropy")
    def no_entropy() -> None:
        raise TwoFactorGenerationError("secure random source is unavailable")

    @app.post("/validate")
    def validate(payload: _ValidationPayload) -> dict[str, int]:
        return {"a": payload.a, "b": payload.b}

    return app


def test_secret_decryption_error_maps_to_500_without_details() -> None:
    client = TestClient(_build_app())

    response = client.get("/unreadable")

    assert response.status_code == 500
    assert response.json() == {
        "detail": {
            "error": "two_factor_secret_unreadable",
            "message": "Two-factor secret could not be read.",
        }
    }
    assert "authentication failed" not in response.text


def test_generation_error_maps_to_503() -> None:
    client = TestClient(_build_app())

    response = client.get("/no-entropy")

    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "two_factor_generation_unavailable"


def test_request_validation_error_handler_returns_sorted_validation_errors() -> None:
    """
    Verify validation handler returns deterministic `validation_error` payload with sorted errors.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Errors are sorted lexicographically by path, then code, then message.
    Raises:
        AssertionError: If response payload differs from deterministic contract.
    Side Effects:
        None.
    """
    client = TestClient(_build_app())

    response = client.post("/validate", json={"z": 1})

    assert response.status_code == 422
    assert response.json() == {
        "detail": {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [
                {
                    "path": "body.a",
                    "code": "required",
                    "message": "Field required",
                },
                {
                    "path": "body.b",
                    "code": "required",
                    "message": "Field required",
                },
                {
                    "path": "body.z",
                    "code": "extra_forbidden",
                    "message": "Extra inputs are not permitted",
                },
            ],
        }
    }
