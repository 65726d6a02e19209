"""Errors raised while decoding inbound events."""

from __future__ import annotations

# Decoder messages can echo large payloads back; keep log lines bounded.
_DETAIL_PREVIEW_LIMIT = 200


class EventError(Exception):
    """Base class for inbound event errors."""


class MalformedEventError(EventError):
    """Raised when an event payload cannot be decoded or lacks identity."""

    @classmethod
    def undecodable(cls, detail: str) -> MalformedEventError:
        """Return an error for payloads the decoder rejects."""
        if len(detail) > _DETAIL_PREVIEW_LIMIT:
            detail = detail[:_DETAIL_PREVIEW_LIMIT] + "..."
        return cls(f"Malformed event payload: {detail}")

    @classmethod
    def missing_identity(cls, bucket: str | None, name: str | None) -> MalformedEventError:
        """Return an error for storage events without bucket or object name."""
        return cls(f"Malformed storage event: bucket={bucket!r} name={name!r}")
