"""Health probe resources for liveness and readiness checks.

These resources are stateless and are registered whether or not the
moderation service is configured.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Reports ``ready`` when the moderation service is wired in and
    ``degraded`` in health-only mode; both answer HTTP 200 so the process
    is never restarted for missing configuration.

    """

    def __init__(self, *, service_configured: bool = False) -> None:
        """Record whether event endpoints are being served."""
        self._service_configured = service_configured

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {
            "status": "ready" if self._service_configured else "degraded",
            "moderation": self._service_configured,
        }
        resp.status = HTTPStatus.OK
