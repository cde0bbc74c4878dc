from __future__ import annotations

from typing import Any

import pytest

import apps.api.main.main as main_module


def test_main_runs_uvicorn_factory_with_cli_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Verify CLI arguments are forwarded to `uvicorn.run` with the app factory path.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
    Returns:
        None.
    Assumptions:
        Logging setup is replaced to keep root handlers untouched.
    Raises:
        AssertionError: If uvicorn or logging receives unexpected arguments.
    Side Effects:
        None.
    """
    calls: dict[str, Any] = {}

    def _fake_run(app: str, **kwargs: Any) -> None:
        calls["app"] = app
        calls["kwargs"] = kwargs

    def _fake_basic_config(**kwargs: Any) -> None:
        calls["logging"] = kwargs

    monkeypatch.setattr(main_module.uvicorn, "run", _fake_run)
    monkeypatch.setattr(main_module.logging, "basicConfig", _fake_basic_config)

    exit_code = main_module.main(["--host", "0.0.0.0", "--port", "9001", "--log-level", "DEBUG"])

    assert exit_code == 0
    assert calls["app"] == "apps.api.main.app:create_app"
    assert calls["kwargs"] == {
        "factory": True,
        "host": "0.0.0.0",
        "port": 9001,
        "log_level": "debug",
    }
    assert calls["logging"]["level"] == "DEBUG"
