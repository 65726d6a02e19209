"""Application factory for the Safeframe Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when a moderation service is
supplied, the push delivery endpoints.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app with push endpoints::

    from safeframe.api.app import AppDependencies, create_app

    app = create_app(AppDependencies(service=build_moderation_service()))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from safeframe.api.errors import (
    InvalidEnvelopeError,
    handle_classification_error,
    handle_invalid_envelope,
    handle_remediation_error,
)
from safeframe.api.health.resources import HealthResource, ReadyResource
from safeframe.remediation.errors import RemediationError
from safeframe.safety.errors import ClassificationError

if typ.TYPE_CHECKING:
    from safeframe.moderation.service import ModerationService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    service
        Moderation service backing the push endpoints. When ``None`` only
        health endpoints are registered.

    """

    service: ModerationService | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None`` or without a
        service, only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    service = dependencies.service if dependencies is not None else None

    app = falcon.asgi.App()

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(service_configured=service is not None))

    if service is not None:
        from safeframe.api.events.resources import (
            MessageEventResource,
            StorageEventResource,
        )

        app.add_route("/events/storage", StorageEventResource(service))
        app.add_route("/events/messages", MessageEventResource(service))

    app.add_error_handler(InvalidEnvelopeError, handle_invalid_envelope)
    app.add_error_handler(ClassificationError, handle_classification_error)
    app.add_error_handler(RemediationError, handle_remediation_error)

    return app
