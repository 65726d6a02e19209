"""API exceptions and Falcon error handlers.

Push deliveries are retried by the platform whenever the endpoint answers
with a 5xx status, so stage failures that warrant redelivery map to 500
while undecodable envelopes, which can never succeed, map to 400.

Usage
-----
Register error handlers on the Falcon app::

    app.add_error_handler(InvalidEnvelopeError, handle_invalid_envelope)
    app.add_error_handler(ClassificationError, handle_classification_error)
    app.add_error_handler(RemediationError, handle_remediation_error)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from safeframe.remediation.errors import RemediationError
    from safeframe.safety.errors import ClassificationError

__all__ = [
    "InvalidEnvelopeError",
    "handle_classification_error",
    "handle_invalid_envelope",
    "handle_remediation_error",
]


class InvalidEnvelopeError(Exception):
    """Raised for push bodies that cannot be decoded; maps to HTTP 400.

    Attributes
    ----------
    reason
        Human-readable description of the decoding failure.

    """

    def __init__(self, reason: str) -> None:
        """Initialize with a decoding failure reason."""
        self.reason = reason
        super().__init__(reason)


async def handle_invalid_envelope(
    _req: Request,
    resp: Response,
    ex: InvalidEnvelopeError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidEnvelopeError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Invalid push envelope",
        "description": ex.reason,
    }


async def handle_classification_error(
    _req: Request,
    resp: Response,
    ex: ClassificationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``ClassificationError`` to an HTTP 500 JSON response."""
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "Classification failed",
        "description": str(ex),
    }


async def handle_remediation_error(
    _req: Request,
    resp: Response,
    ex: RemediationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``RemediationError`` to an HTTP 500 JSON response naming the stage."""
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "Remediation failed",
        "description": str(ex),
        "stage": str(ex.outcome.stage),
    }
