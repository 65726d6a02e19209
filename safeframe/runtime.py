"""Safeframe runtime entrypoint for container deployments.

This module provides the ASGI application factory served by Granian. When
``SAFEFRAME_BLURRED_BUCKET_NAME`` is set the runtime builds the moderation
service so the push endpoints are registered; otherwise it starts in
health-only mode.

Configuration is driven by environment variables:

- ``SAFEFRAME_HOST``: Bind address (default ``0.0.0.0``)
- ``SAFEFRAME_PORT``: Listen port (default ``8080``)
- ``SAFEFRAME_LOG_LEVEL``: Log level (default ``INFO``)
- ``SAFEFRAME_BLURRED_BUCKET_NAME``: Destination bucket (enables the push
  endpoints when set)

Run the service directly with ``python -m safeframe.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from safeframe.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid SAFEFRAME_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from the environment.

    Returns
    -------
    falcon.asgi.App
        Application with health endpoints, plus the push endpoints when the
        destination bucket is configured.

    """
    from safeframe.api.app import AppDependencies
    from safeframe.api.app import create_app as _create_api_app

    if not os.environ.get("SAFEFRAME_BLURRED_BUCKET_NAME"):
        log_warning(
            logger,
            "SAFEFRAME_BLURRED_BUCKET_NAME unset; serving health endpoints only",
        )
        return _create_api_app()

    from safeframe.moderation.service import build_moderation_service

    return _create_api_app(AppDependencies(service=build_moderation_service()))


def main() -> None:
    """Start the Safeframe runtime server using Granian.

    Reads ``SAFEFRAME_HOST``, ``SAFEFRAME_PORT``, and ``SAFEFRAME_LOG_LEVEL``
    from the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("SAFEFRAME_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("SAFEFRAME_PORT", "8080"))
    log_level_str = os.environ.get("SAFEFRAME_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid SAFEFRAME_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Safeframe runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "safeframe.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
