"""Inbound event structures and payload parsing.

Events arrive as opaque bytes from the delivery platform. Parsing is
explicit: optional fields decode into typed results instead of being probed
on a loosely typed JSON tree, so every outcome (present and valid, present
and invalid, absent) maps deterministically onto handler behaviour.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum

import msgspec

from safeframe.common.naming import object_uri
from safeframe.events.errors import MalformedEventError

ORIGIN_TIMESTAMP_FIELD = "timestamp"


@dc.dataclass(frozen=True, slots=True)
class InboundEvent:
    """One delivery from the event platform.

    Attributes
    ----------
    payload
        Raw event body exactly as delivered.
    event_id
        Platform-assigned delivery identifier, when the platform provides one.

    """

    payload: bytes
    event_id: str | None = None

    @classmethod
    def from_text(cls, payload: str, *, event_id: str | None = None) -> InboundEvent:
        """Build an event from a text payload encoded as UTF-8."""
        return cls(payload=payload.encode("utf-8"), event_id=event_id)

    @property
    def text(self) -> str:
        """Payload decoded for log output; undecodable bytes are replaced."""
        return self.payload.decode("utf-8", errors="replace")


@dc.dataclass(frozen=True, slots=True)
class ObjectReference:
    """Identity of a stored object.

    Both components must be non-empty; a reference missing either cannot be
    constructed, so downstream stages never see a partial identity.

    Raises
    ------
    MalformedEventError
        If ``bucket`` or ``key`` is empty.

    """

    bucket: str
    key: str

    def __post_init__(self) -> None:
        """Reject references with a missing component."""
        if not self.bucket or not self.key:
            raise MalformedEventError.missing_identity(self.bucket, self.key)

    @property
    def uri(self) -> str:
        """Canonical ``gs://bucket/key`` URI for the object."""
        return object_uri(self.bucket, self.key)

    def __str__(self) -> str:
        """Render as the canonical URI."""
        return self.uri


class TimestampState(enum.StrEnum):
    """Parse states for the optional origin timestamp field."""

    PRESENT = "present"
    INVALID = "invalid"
    ABSENT = "absent"


@dc.dataclass(frozen=True, slots=True)
class OriginTimestamp:
    """Result of looking for an origin timestamp in an event payload.

    ``value`` is an aware UTC datetime when ``state`` is ``PRESENT`` and
    ``None`` otherwise. ``raw`` keeps the offending value for ``INVALID``.
    """

    state: TimestampState
    value: dt.datetime | None = None
    raw: object | None = None

    @classmethod
    def absent(cls) -> OriginTimestamp:
        """Return the result for payloads without a timestamp field."""
        return cls(state=TimestampState.ABSENT)

    @classmethod
    def invalid(cls, raw: object) -> OriginTimestamp:
        """Return the result for a timestamp field that does not parse."""
        return cls(state=TimestampState.INVALID, raw=raw)

    @classmethod
    def present(cls, value: dt.datetime) -> OriginTimestamp:
        """Return the result for a well-formed timestamp."""
        return cls(state=TimestampState.PRESENT, value=value.astimezone(dt.UTC))


def _parse_iso_with_offset(raw: str) -> dt.datetime | None:
    try:
        parsed = dt.datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    # Without an offset the instant is ambiguous; reject rather than guess.
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        return None
    return parsed


def parse_origin_timestamp(payload: bytes | str) -> OriginTimestamp:
    """Extract the origin timestamp embedded in an event payload.

    The payload is expected to be a JSON object whose ``timestamp`` field
    holds an ISO-8601 datetime with offset. Payloads that are not JSON
    objects, or objects without the field, are ``ABSENT``; a field that is
    not a string or does not parse as an offset-qualified ISO-8601 datetime
    is ``INVALID``.

    Examples
    --------
    >>> parse_origin_timestamp(b'{"timestamp": "2024-05-01T10:00:00Z"}').state
    <TimestampState.PRESENT: 'present'>
    >>> parse_origin_timestamp(b"hello").state
    <TimestampState.ABSENT: 'absent'>

    """
    try:
        body = msgspec.json.decode(payload)
    except msgspec.DecodeError:
        return OriginTimestamp.absent()

    if not isinstance(body, dict) or ORIGIN_TIMESTAMP_FIELD not in body:
        return OriginTimestamp.absent()

    raw = body[ORIGIN_TIMESTAMP_FIELD]
    if not isinstance(raw, str):
        return OriginTimestamp.invalid(raw)

    parsed = _parse_iso_with_offset(raw)
    if parsed is None:
        return OriginTimestamp.invalid(raw)
    return OriginTimestamp.present(parsed)


class StorageObjectEvent(msgspec.Struct, kw_only=True, rename="camel"):
    """Storage change descriptor delivered when an object is finalized.

    Field names follow the storage service's camelCase JSON. ``bucket`` and
    ``name`` are optional at decode time so a descriptor missing either can
    be reported as malformed instead of failing inside the decoder.
    """

    bucket: str | None = None
    name: str | None = None
    content_type: str | None = None
    generation: str | None = None
    time_created: str | None = None

    def object_reference(self) -> ObjectReference:
        """Return the referenced object.

        Raises
        ------
        MalformedEventError
            If the descriptor lacks a bucket or object name.

        """
        return ObjectReference(bucket=self.bucket or "", key=self.name or "")


def decode_storage_event(event: InboundEvent) -> StorageObjectEvent:
    """Decode a storage change descriptor from an inbound event.

    Raises
    ------
    MalformedEventError
        If the payload is not a JSON object of the expected shape.

    """
    try:
        return msgspec.json.decode(event.payload, type=StorageObjectEvent)
    except msgspec.DecodeError as exc:
        raise MalformedEventError.undecodable(str(exc)) from exc


class PushMessage(msgspec.Struct, kw_only=True, rename="camel"):
    """Message carried by a push subscription envelope."""

    data: bytes = b""
    message_id: str | None = None
    publish_time: str | None = None
    attributes: dict[str, str] = msgspec.field(default_factory=dict)


class PushEnvelope(msgspec.Struct, kw_only=True):
    """Push subscription request body wrapping one message."""

    message: PushMessage
    subscription: str | None = None

    def to_inbound_event(self) -> InboundEvent:
        """Unwrap the base64 message data into an inbound event."""
        return InboundEvent(payload=self.message.data, event_id=self.message.message_id)


def decode_push_envelope(body: bytes) -> PushEnvelope:
    """Decode a push subscription envelope.

    Raises
    ------
    MalformedEventError
        If the body is not a valid envelope or the data is not base64.

    """
    try:
        return msgspec.json.decode(body, type=PushEnvelope)
    except msgspec.DecodeError as exc:
        raise MalformedEventError.undecodable(str(exc)) from exc
