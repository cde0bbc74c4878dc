"""
Shared API error handlers mapping 2FA infrastructure failures and request validation to JSON.

Docs:
  - docs/architecture/two_factor/two-factor-totp-policy-v1.md
"""

from __future__ import annotations

import logging
from typing import Any, Sequence, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from freecrm.contexts.two_factor.application.ports import (
    SecretDecryptionError,
    TwoFactorGenerationError,
)

log = logging.getLogger(__name__)


def register_api_error_handlers(*, app: FastAPI) -> None:
    """
    Register global handlers for 2FA infrastructure errors and validation errors.

    Args:
        app: FastAPI application instance.
    Returns:
        None.
    Assumptions:
        Handlers are installed once during application startup.
    Raises:
        ValueError: If `app` dependency is missing.
    Side Effects:
        Mutates FastAPI exception-handler registry.
    """
    if app is None:  # type: ignore[truthy-bool]
        raise ValueError("register_api_error_handlers requires app")

    app.add_exception_handler(SecretDecryptionError, secret_decryption_error_handler)
    app.add_exception_handler(TwoFactorGenerationError, generation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)


def secret_decryption_error_handler(request: Request, error: Exception) -> JSONResponse:
    """
    Convert an unreadable stored secret into a 500 payload without leaking details.

    Args:
        request: Starlette request.
        error: Raised `SecretDecryptionError`.
    Returns:
        JSONResponse: HTTP 500 payload.
    Assumptions:
        Usually a wrong `TWO_FACTOR_ENCRYPTION_KEY` or tampered storage.
    Raises:
        None.
    Side Effects:
        Logs the failure reason.
    """
    log.error(
        "two-factor secret decryption failed path=%s reason=%s",
        request.url.path,
        error,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": {
                "error": "two_factor_secret_unreadable",
                "message": "Two-factor secret could not be read.",
            }
        },
    )


def generation_error_handler(request: Request, error: Exception) -> JSONResponse:
    log.error("two-factor generation failed path=%s reason=%s", request.url.path, error)
    return JSONResponse(
        status_code=503,
        content={
            "detail": {
                "error": "two_factor_generation_unavailable",
                "message": "Secure random source is unavailable.",
            }
        },
    )


def request_validation_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """
    Convert FastAPI `RequestValidationError` into a 422 payload with sorted errors.

    Args:
        _request: Starlette request (unused).
        error: Raised validation exception.
    Returns:
        JSONResponse: HTTP 422 payload shaped like 2FA operation errors plus `errors`.
    Assumptions:
        Validation errors include `loc`, `type` and `msg`.
    Raises:
        None.
    Side Effects:
        None.
    """
    validation_error = cast(RequestValidationError, error)
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "error": "validation_error",
                "message": "Validation failed",
                "errors": _sorted_validation_errors(raw_errors=validation_error.errors()),
            }
        },
    )


def _sorted_validation_errors(*, raw_errors: Sequence[Any]) -> list[dict[str, str]]:
    """
    Normalize validation errors and sort them by path, code and message.

    Args:
        raw_errors: Raw error mappings from Pydantic.
    Returns:
        list[dict[str, str]]: `path`/`code`/`message` items.
    Assumptions:
        Missing fields use Pydantic `missing` type, reported as `required`.
    Raises:
        None.
    Side Effects:
        None.
    """
    items: list[dict[str, str]] = []
    for raw_error in raw_errors:
        loc = raw_error.get("loc") or ()
        raw_type = str(raw_error.get("type") or "validation_error")
        items.append(
            {
                "path": ".".join(str(part) for part in loc) or "unknown",
                "code": "required" if raw_type == "missing" else raw_type,
                "message": str(raw_error.get("msg", "Validation error")),
            }
        )
    return sorted(items, key=lambda item: (item["path"], item["code"], item["message"]))
