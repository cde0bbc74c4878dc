"""
FastAPI application factory for the Free CRM two-factor service.
"""

from __future__ import annotations

import os
from typing import Mapping

from fastapi import FastAPI

from apps.api.common import register_api_error_handlers
from apps.api.wiring.modules import build_two_factor_api_module


def create_app(*, environ: Mapping[str, str] | None = None) -> FastAPI:
    """
    Build FastAPI app with the 2FA module wired at startup.

    Docs: docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related: apps.api.wiring.modules.two_factor,
      freecrm.contexts.two_factor.adapters.inbound.api.routes.two_factor

    Args:
        environ: Optional environment mapping override.
    Returns:
        FastAPI: Application instance with registered routers.
    Assumptions:
        Module wiring validates config before the first request.
    Raises:
        ValueError: If 2FA config is invalid or fail-fast requires a missing key.
    Side Effects:
        Reads optional 2FA YAML and derives the secret cipher key.
    """
    effective_environ = os.environ if environ is None else environ
    app = FastAPI(
        title="Free CRM Two-Factor API",
        version="1.0.0",
    )
    register_api_error_handlers(app=app)
    two_factor_module = build_two_factor_api_module(environ=effective_environ)
    app.include_router(two_factor_module.router)
    return app
