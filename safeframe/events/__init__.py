"""Inbound event models and the staleness guard."""

from __future__ import annotations

from .errors import EventError, MalformedEventError
from .models import (
    InboundEvent,
    ObjectReference,
    OriginTimestamp,
    PushEnvelope,
    StorageObjectEvent,
    TimestampState,
    decode_push_envelope,
    decode_storage_event,
    parse_origin_timestamp,
)
from .staleness import (
    MAX_EVENT_AGE,
    EventAge,
    StalenessGuard,
    compute_event_age,
    should_process,
)

__all__ = [
    "MAX_EVENT_AGE",
    "EventAge",
    "EventError",
    "InboundEvent",
    "MalformedEventError",
    "ObjectReference",
    "OriginTimestamp",
    "PushEnvelope",
    "StalenessGuard",
    "StorageObjectEvent",
    "TimestampState",
    "compute_event_age",
    "decode_push_envelope",
    "decode_storage_event",
    "parse_origin_timestamp",
    "should_process",
]
