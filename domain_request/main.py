from __future__ import annotations

import argparse
import logging
import os
import sys
import uuid

from fastapi import FastAPI
import uvicorn

from domain_request.api.http_app import build_app
from domain_request.logging_setup import configure_logging
from domain_request.roles import SUPPORTED_ROLES, RuntimeRole, validate_role
from domain_request.services.bootstrap import RuntimeContainer, build_runtime_container

DEFAULT_PORTS = {"api": 8000, "relay": 8100}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Domain request relay and dashboard backend")
    parser.add_argument("--role", required=True, help=f"Runtime role ({', '.join(SUPPORTED_ROLES)})")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=None, help="Defaults to 8000 for api, 8100 for relay")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    parser.add_argument(
        "--dry-run-startup",
        action="store_true",
        help="Build every collaborator, log the wiring and exit",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (local development)",
    )
    return parser.parse_args(argv)


def _http_app(role: RuntimeRole, run_id: str, container: RuntimeContainer) -> FastAPI:
    return build_app(
        role=role.name,
        run_id=run_id,
        api_deps=container.api_deps,
        on_startup=container.on_startup,
        on_shutdown=container.on_shutdown,
    )


def create_runtime_app() -> FastAPI:
    """uvicorn factory used by --reload; the role travels through APP_ROLE."""
    role = validate_role(os.getenv("APP_ROLE", "api"))
    configure_logging(getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO))
    return _http_app(role, str(uuid.uuid4()), build_runtime_container(role))


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        role = validate_role(args.role)
    except ValueError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        sys.stderr.write(f"Try one of: {', '.join(SUPPORTED_ROLES)}\n")
        return 2

    configure_logging(getattr(logging, args.log_level))
    run_id = str(uuid.uuid4())
    logger = logging.getLogger("runtime")
    container = build_runtime_container(role)

    wiring = {
        "role": role.name,
        "service": role.name,
        "run_id": run_id,
        "has_admin_api_url": bool(container.relay_settings.admin_api_url),
        "has_admin_api_key": bool(container.relay_settings.admin_api_key),
    }
    logger.info("runtime initialized", extra=wiring)

    if args.dry_run_startup:
        logger.info("dry-run startup complete", extra=wiring)
        return 0

    port = args.port if args.port is not None else DEFAULT_PORTS[role.name]
    if args.reload:
        os.environ["APP_ROLE"] = role.name
        os.environ["LOG_LEVEL"] = args.log_level
        uvicorn.run(
            "domain_request.main:create_runtime_app",
            host=args.host,
            port=port,
            log_level="warning",
            reload=True,
            factory=True,
        )
        return 0

    uvicorn.run(_http_app(role, run_id, container), host=args.host, port=port, log_level="warning")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
