"""Push delivery resources.

``POST /events/storage`` takes a storage change descriptor as its body and
runs the full moderation flow. ``POST /events/messages`` takes a push
subscription envelope and applies only the staleness guard to the wrapped
message. Both answer 204 whenever the event is handled, whatever the
moderation outcome; failures that need redelivery surface through the
error handlers in :mod:`safeframe.api.errors`.
"""

from __future__ import annotations

import typing as typ

import falcon

from safeframe.api.errors import InvalidEnvelopeError
from safeframe.events.errors import MalformedEventError
from safeframe.events.models import InboundEvent, decode_push_envelope

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from safeframe.moderation.service import ModerationService

__all__ = ["MessageEventResource", "StorageEventResource"]

# CloudEvents binary-mode delivery identifier.
_EVENT_ID_HEADER = "ce-id"


class StorageEventResource:
    """Resource receiving storage change descriptors."""

    def __init__(self, service: ModerationService) -> None:
        """Configure the resource with the moderation service."""
        self._service = service

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /events/storage.

        The moderation outcome is reported in the ``X-Moderation-Outcome``
        response header.
        """
        body = await req.stream.read()
        event = InboundEvent(payload=body, event_id=req.get_header(_EVENT_ID_HEADER))
        result = await self._service.handle_storage_event(event)
        resp.set_header("X-Moderation-Outcome", str(result.outcome))
        resp.status = falcon.HTTP_204


class MessageEventResource:
    """Resource receiving push subscription envelopes."""

    def __init__(self, service: ModerationService) -> None:
        """Configure the resource with the moderation service."""
        self._service = service

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /events/messages.

        Raises
        ------
        InvalidEnvelopeError
            If the body is not a valid push envelope.

        """
        body = await req.stream.read()
        try:
            envelope = decode_push_envelope(body)
        except MalformedEventError as exc:
            raise InvalidEnvelopeError(str(exc)) from exc

        processed = await self._service.handle_message(envelope.to_inbound_event())
        resp.set_header("X-Moderation-Outcome", "processing" if processed else "dropped")
        resp.status = falcon.HTTP_204
