"""
CLI entrypoint for running the Free CRM two-factor API service.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn


def _configure_logging(*, level: str) -> None:
    """
    Configure process-wide logging defaults.

    Args:
        level: Root log level name.
    Returns:
        None.
    Assumptions:
        Logging is configured once at process start.
    Raises:
        ValueError: If level name is unknown.
    Side Effects:
        Sets root logging handlers/format.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="freecrm-two-factor-api")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    parser.add_argument("--log-level", default="info", help="Root log level")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Run API process using uvicorn.

    Args:
        argv: Optional command arguments without program name.
    Returns:
        int: Process exit code.
    Assumptions:
        Factory `apps.api.main.app:create_app` reads config from `os.environ`.
    Raises:
        None.
    Side Effects:
        Starts HTTP server loop.
    """
    args = _build_parser().parse_args(argv)
    _configure_logging(level=args.log_level)
    uvicorn.run(
        "apps.api.main.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
