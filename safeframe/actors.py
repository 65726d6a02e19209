"""Dramatiq actors delivering events to the moderation service.

Each actor is one delivery-platform invocation: it decodes the payload,
runs the service to completion, and raises to request redelivery. Events
the service handles without raising (dropped, malformed, accepted,
remediated, or a failed transform) are acknowledged.

Usage
-----
>>> moderate_image_job.send('{"bucket": "uploads", "name": "cat.jpg"}')
>>> process_message_job.send('{"timestamp": "2024-05-01T10:00:00Z"}')

"""

from __future__ import annotations

import asyncio
import os
import sys
import threading
import typing as typ

import dramatiq
from dramatiq.brokers.stub import StubBroker

from safeframe.events.models import InboundEvent
from safeframe.moderation.service import ModerationService, build_moderation_service

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# Process-wide service shared across actor invocations.
_SERVICE_CACHE: dict[str, ModerationService] = {}
_CACHE_LOCK = threading.Lock()
_SERVICE_KEY = "default"

_STUB_BROKER_FLAG = "SAFEFRAME_ALLOW_STUB_BROKER"


def _stub_broker_allowed() -> bool:
    """Return True for local runs that opted in and for test sessions."""
    flag = os.environ.get(_STUB_BROKER_FLAG, "").strip().lower()
    return flag in {"1", "true", "yes"} or "pytest" in sys.modules


def ensure_broker_configured() -> dramatiq.Broker:
    """Return the global broker, installing a ``StubBroker`` where allowed.

    Workers configure RabbitMQ or Redis before importing this module. The
    stub is installed only under pytest or with ``SAFEFRAME_ALLOW_STUB_BROKER``.

    Raises
    ------
    RuntimeError
        If no broker is configured and stub brokers are not allowed.

    """
    with _CACHE_LOCK:
        try:
            return dramatiq.get_broker()
        except (ImportError, LookupError) as exc:
            # ImportError: the default RabbitMQ broker's extra is not installed.
            if not _stub_broker_allowed():
                msg = (
                    "No Dramatiq broker configured for moderation actors; set "
                    f"{_STUB_BROKER_FLAG}=1 for local runs or configure a broker"
                )
                raise RuntimeError(msg) from exc
        broker = StubBroker()
        dramatiq.set_broker(broker)
        return broker


# Actor declaration binds to the current broker.
ensure_broker_configured()


def _get_or_create_service() -> ModerationService:
    """Return the cached service, building it from the environment once.

    Thread-safe: uses a lock to prevent race conditions in Dramatiq workers.
    """
    with _CACHE_LOCK:
        if _SERVICE_KEY not in _SERVICE_CACHE:
            _SERVICE_CACHE[_SERVICE_KEY] = build_moderation_service()
        return _SERVICE_CACHE[_SERVICE_KEY]


def set_service(service: ModerationService | None) -> None:
    """Install ``service`` for subsequent invocations, or clear it with None."""
    with _CACHE_LOCK:
        if service is None:
            _SERVICE_CACHE.clear()
        else:
            _SERVICE_CACHE[_SERVICE_KEY] = service


T = typ.TypeVar("T")


def _run_actor_async(
    payload: str,
    event_id: str | None,
    async_fn: cabc.Callable[[ModerationService, InboundEvent], cabc.Awaitable[T]],
) -> T:
    """Execute the common scaffolding shared by the actors."""
    event = InboundEvent.from_text(payload, event_id=event_id)
    service = _get_or_create_service()
    return asyncio.run(async_fn(service, event))


@dramatiq.actor
def moderate_image_job(payload: str, *, event_id: str | None = None) -> str:
    """Moderate the object named by a storage change payload.

    Parameters
    ----------
    payload
        Storage change descriptor as JSON text.
    event_id
        Optional delivery identifier for log correlation.

    Returns
    -------
    str
        The moderation outcome value.

    Raises
    ------
    ClassificationError
        If classification cannot complete; Dramatiq retries the message.
    RemediationError
        If remediation fails at download or upload; Dramatiq retries.

    """

    async def execute(service: ModerationService, event: InboundEvent) -> str:
        result = await service.handle_storage_event(event)
        return str(result.outcome)

    return _run_actor_async(payload, event_id, execute)


@dramatiq.actor
def process_message_job(payload: str, *, event_id: str | None = None) -> bool:
    """Apply the staleness guard to a message payload.

    Returns
    -------
    bool
        ``True`` when the message was processed, ``False`` when dropped.

    """

    async def execute(service: ModerationService, event: InboundEvent) -> bool:
        return await service.handle_message(event)

    return _run_actor_async(payload, event_id, execute)
