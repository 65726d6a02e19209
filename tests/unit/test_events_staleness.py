"""Unit tests for the staleness guard."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from safeframe.events.models import TimestampState
from safeframe.events.staleness import (
    MAX_EVENT_AGE,
    StalenessGuard,
    compute_event_age,
    should_process,
)
from safeframe.observability import ModerationEventType
from tests.helpers.log_capture import ExplodingLogger
from tests.helpers.moderation_fakes import iso, message_event

if typ.TYPE_CHECKING:
    from safeframe.events.models import InboundEvent
    from tests.helpers.log_capture import RecordingLogger


def _event_aged(now: dt.datetime, age_ms: int) -> InboundEvent:
    return message_event(iso(now - dt.timedelta(milliseconds=age_ms)))


def test_max_event_age_is_ten_seconds() -> None:
    """The drop threshold is 10 000 milliseconds."""
    assert MAX_EVENT_AGE == 10_000


class TestComputeEventAge:
    """Tests for compute_event_age."""

    def test_age_from_origin(self, now: dt.datetime) -> None:
        """Age is the distance from the origin timestamp to now."""
        age = compute_event_age(_event_aged(now, 2_500), now)
        assert age.age_ms == 2_500
        assert age.origin.state is TimestampState.PRESENT

    def test_absent_timestamp_is_age_zero(self, now: dt.datetime) -> None:
        """Events without a timestamp are treated as fresh."""
        age = compute_event_age(message_event(), now)
        assert age.age_ms == 0
        assert age.origin.state is TimestampState.ABSENT

    def test_future_origin_is_negative(self, now: dt.datetime) -> None:
        """Clock skew yields a negative age."""
        age = compute_event_age(_event_aged(now, -3_000), now)
        assert age.age_ms == -3_000

    def test_rejects_naive_now(self) -> None:
        """The invocation time must be aware."""
        with pytest.raises(ValueError, match="naive"):
            compute_event_age(message_event(), dt.datetime(2024, 5, 1))  # noqa: DTZ001


class TestStalenessGuardDecision:
    """Tests for StalenessGuard.should_process decisions."""

    @pytest.mark.parametrize(
        ("age_ms", "expected"),
        [
            (0, True),
            (9_999, True),
            (10_000, True),
            (10_001, False),
            (15_000, False),
            (-60_000, True),
        ],
    )
    def test_threshold(
        self,
        now: dt.datetime,
        age_ms: int,
        *,
        expected: bool,
        event_log: RecordingLogger,
    ) -> None:
        """Only ages strictly greater than the maximum are dropped."""
        guard = StalenessGuard()
        assert guard.should_process(_event_aged(now, age_ms), now) is expected, (
            f"age {age_ms}ms should {'process' if expected else 'drop'}"
        )

    def test_absent_timestamp_processes(
        self, now: dt.datetime, event_log: RecordingLogger
    ) -> None:
        """Events without a timestamp always proceed."""
        assert StalenessGuard().should_process(message_event(), now) is True

    def test_invalid_timestamp_processes_and_warns(
        self, now: dt.datetime, event_log: RecordingLogger
    ) -> None:
        """Malformed timestamps never cause a drop."""
        assert StalenessGuard().should_process(message_event("not-a-date"), now)
        assert event_log.events == [
            ModerationEventType.EVENT_TIMESTAMP_INVALID,
            ModerationEventType.EVENT_PROCESSING,
        ]
        assert event_log.records[0].level == "WARNING"

    def test_uses_clock_when_now_omitted(self, now: dt.datetime) -> None:
        """The injected clock supplies the invocation time."""
        guard = StalenessGuard(clock=lambda: now)
        assert guard.should_process(_event_aged(now, 20_000)) is False

    def test_evaluate_does_not_log(
        self, now: dt.datetime, event_log: RecordingLogger
    ) -> None:
        """evaluate computes the age without emitting records."""
        age = StalenessGuard().evaluate(_event_aged(now, 1_000), now)
        assert age.age_ms == 1_000
        assert event_log.records == []


class TestStalenessGuardLogging:
    """Tests for the guard's observability records."""

    def test_drop_is_logged_with_age_and_payload(
        self, now: dt.datetime, event_log: RecordingLogger
    ) -> None:
        """Dropped events log their id, age and payload at INFO."""
        event = _event_aged(now, 15_000)
        StalenessGuard().should_process(event, now)

        [record] = event_log.for_event(ModerationEventType.EVENT_DROPPED)
        assert record.level == "INFO"
        assert "event_id=msg-1" in record.message
        assert "age_ms=15000" in record.message
        assert "max_age_ms=10000" in record.message
        assert event.text in record.message

    def test_processing_is_logged(
        self, now: dt.datetime, event_log: RecordingLogger
    ) -> None:
        """Fresh events log a processing record."""
        StalenessGuard().should_process(_event_aged(now, 10), now)
        [record] = event_log.for_event(ModerationEventType.EVENT_PROCESSING)
        assert "age_ms=10" in record.message

    @pytest.mark.parametrize(("age_ms", "expected"), [(1_000, True), (30_000, False)])
    def test_logging_failure_does_not_change_decision(
        self,
        monkeypatch: pytest.MonkeyPatch,
        now: dt.datetime,
        age_ms: int,
        *,
        expected: bool,
    ) -> None:
        """A failing log sink never alters the guard's verdict."""
        monkeypatch.setattr("safeframe.observability.logger", ExplodingLogger())
        assert StalenessGuard().should_process(_event_aged(now, age_ms), now) is expected


def test_module_level_should_process(now: dt.datetime, event_log: RecordingLogger) -> None:
    """The module-level helper applies the default guard."""
    assert should_process(_event_aged(now, 15_000), now) is False
    assert should_process(_event_aged(now, 5_000), now) is True
