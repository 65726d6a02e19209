"""Staleness guard for at-least-once event delivery.

Delivery platforms redeliver an event when a handler times out or crashes,
sometimes long after the triggering condition occurred. The guard compares
the origin timestamp embedded in the event payload against the invocation
time and drops events older than ``MAX_EVENT_AGE``.

The guard keeps no state between invocations. It cannot detect duplicate
deliveries inside the window, only deliveries that arrive too late.
"""

from __future__ import annotations

import contextlib
import dataclasses
import typing as typ

from safeframe.common.time import as_utc, elapsed_ms, utcnow
from safeframe.events.models import (
    InboundEvent,
    OriginTimestamp,
    TimestampState,
    parse_origin_timestamp,
)
from safeframe.observability import ModerationEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

# Maximum event age in milliseconds; ages equal to it still process.
MAX_EVENT_AGE: typ.Final[int] = 10_000


@dataclasses.dataclass(frozen=True, slots=True)
class EventAge:
    """Age of one event at invocation time.

    ``age_ms`` is zero when the origin timestamp is absent or invalid, and
    negative when the origin lies in the future (clock skew).
    """

    age_ms: int
    origin: OriginTimestamp
    now: dt.datetime

    def exceeds(self, max_age_ms: int) -> bool:
        """Return True when the age is strictly greater than ``max_age_ms``."""
        return self.age_ms > max_age_ms


def compute_event_age(event: InboundEvent, now: dt.datetime) -> EventAge:
    """Compute the age of ``event`` relative to ``now``.

    Both operands are normalized to UTC before subtraction. An absent or
    malformed origin timestamp is treated as originating at ``now``.

    Raises
    ------
    ValueError
        If ``now`` is a naive datetime.

    """
    utc_now = as_utc(now)
    origin = parse_origin_timestamp(event.payload)
    if origin.state is TimestampState.PRESENT and origin.value is not None:
        age_ms = elapsed_ms(origin.value, utc_now)
    else:
        age_ms = 0
    return EventAge(age_ms=age_ms, origin=origin, now=utc_now)


class StalenessGuard:
    """Decide whether a delivered event is fresh enough to process.

    Parameters
    ----------
    clock
        Source of the invocation time when ``should_process`` is called
        without ``now``. Defaults to :func:`safeframe.common.time.utcnow`.
    event_logger
        Receiver for the drop/process observability records.

    """

    def __init__(
        self,
        *,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
        event_logger: ModerationEventLogger | None = None,
    ) -> None:
        """Create a guard bound to a clock and event logger."""
        self._clock = clock
        self._event_logger = event_logger or ModerationEventLogger()

    @property
    def max_event_age_ms(self) -> int:
        """Threshold above which events are dropped."""
        return MAX_EVENT_AGE

    def evaluate(self, event: InboundEvent, now: dt.datetime | None = None) -> EventAge:
        """Return the computed age of ``event`` without logging."""
        return compute_event_age(event, self._clock() if now is None else now)

    def should_process(
        self,
        event: InboundEvent,
        now: dt.datetime | None = None,
    ) -> bool:
        """Return True to process ``event`` and False to drop it.

        Events whose age exceeds ``MAX_EVENT_AGE`` are dropped; all others,
        including events with a future origin timestamp, are processed.
        """
        age = self.evaluate(event, now)
        proceed = not age.exceeds(MAX_EVENT_AGE)
        self._record(event, age, proceed=proceed)
        return proceed

    def _record(self, event: InboundEvent, age: EventAge, *, proceed: bool) -> None:
        # Observability never alters the decision already made.
        with contextlib.suppress(Exception):
            if age.origin.state is TimestampState.INVALID:
                self._event_logger.log_timestamp_invalid(event, raw=age.origin.raw)
            if proceed:
                self._event_logger.log_event_processing(event, age_ms=age.age_ms)
            else:
                self._event_logger.log_event_dropped(
                    event, age_ms=age.age_ms, max_age_ms=MAX_EVENT_AGE
                )


def should_process(event: InboundEvent, now: dt.datetime | None = None) -> bool:
    """Apply the default staleness guard to ``event``.

    Examples
    --------
    >>> import datetime as dt
    >>> now = dt.datetime(2024, 5, 1, 10, 0, 15, tzinfo=dt.UTC)
    >>> should_process(
    ...     InboundEvent.from_text('{"timestamp": "2024-05-01T10:00:00Z"}'), now
    ... )
    False

    """
    return StalenessGuard().should_process(event, now)
