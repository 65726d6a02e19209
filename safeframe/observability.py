"""Emit structured observability events for moderation invocations.

Every decision an invocation makes is recorded as one ``[event.id]``
line of ``key=value`` pairs so log aggregators can count drops, accepts,
and remediations without parsing free text.

Usage
-----
>>> event_logger = ModerationEventLogger()
>>> event_logger.log_event_processing(event, age_ms=120)

"""

from __future__ import annotations

import enum
import typing as typ

from safeframe.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from pathlib import Path

    from safeframe.events.models import InboundEvent, ObjectReference
    from safeframe.remediation.errors import TransformError
    from safeframe.remediation.pipeline import RemediationOutcome
    from safeframe.safety.models import SafeSearchScores

logger = get_logger(__name__)


class ModerationEventType(enum.StrEnum):
    """Structured log event types for moderation invocations."""

    EVENT_DROPPED = "moderation.event.dropped"
    EVENT_PROCESSING = "moderation.event.processing"
    EVENT_TIMESTAMP_INVALID = "moderation.event.timestamp_invalid"
    EVENT_MALFORMED = "moderation.event.malformed"
    CLASSIFICATION_STARTED = "moderation.classification.started"
    CLASSIFICATION_FAILED = "moderation.classification.failed"
    CLASSIFICATION_REJECTED = "moderation.classification.rejected"
    CLASSIFICATION_EMPTY = "moderation.classification.empty"
    DECISION_ACCEPTED = "moderation.decision.accepted"
    DECISION_REMEDIATE = "moderation.decision.remediate"
    TRANSFORM_FAILED = "moderation.transform.failed"
    REMEDIATION_COMPLETED = "moderation.remediation.completed"
    REMEDIATION_FAILED = "moderation.remediation.failed"
    CLEANUP_FAILED = "moderation.cleanup.failed"


class ModerationEventLogger:
    """Emit moderation events via femtologging."""

    def log_event_dropped(
        self,
        event: InboundEvent,
        *,
        age_ms: int,
        max_age_ms: int,
    ) -> None:
        """Log an event dropped for exceeding the maximum age.

        Stale events are expected under redelivery and are logged at INFO.
        """
        log_info(
            logger,
            "[%s] event_id=%s age_ms=%d max_age_ms=%d payload=%s",
            ModerationEventType.EVENT_DROPPED,
            event.event_id,
            age_ms,
            max_age_ms,
            event.text,
        )

    def log_event_processing(self, event: InboundEvent, *, age_ms: int) -> None:
        """Log an event accepted for processing by the staleness guard."""
        log_info(
            logger,
            "[%s] event_id=%s age_ms=%d payload=%s",
            ModerationEventType.EVENT_PROCESSING,
            event.event_id,
            age_ms,
            event.text,
        )

    def log_timestamp_invalid(self, event: InboundEvent, *, raw: object) -> None:
        """Log an origin timestamp that failed to parse; the event proceeds."""
        log_warning(
            logger,
            "[%s] event_id=%s raw_timestamp=%r",
            ModerationEventType.EVENT_TIMESTAMP_INVALID,
            event.event_id,
            raw,
        )

    def log_event_malformed(self, event: InboundEvent, *, reason: str) -> None:
        """Log an event rejected for missing or undecodable object identity."""
        log_error(
            logger,
            "[%s] event_id=%s reason=%s payload=%s",
            ModerationEventType.EVENT_MALFORMED,
            event.event_id,
            reason,
            event.text,
        )

    def log_classification_started(self, ref: ObjectReference) -> None:
        """Log the start of a classification request."""
        log_info(
            logger,
            "[%s] object=%s",
            ModerationEventType.CLASSIFICATION_STARTED,
            ref.uri,
        )

    def log_classification_failed(
        self,
        ref: ObjectReference,
        error: BaseException,
    ) -> None:
        """Log a classification call that could not complete."""
        log_error(
            logger,
            "[%s] object=%s error_type=%s error_message=%s",
            ModerationEventType.CLASSIFICATION_FAILED,
            ref.uri,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_classification_rejected(self, ref: ObjectReference, *, detail: str) -> None:
        """Log a per-item error reported by the classification service."""
        log_error(
            logger,
            "[%s] object=%s detail=%s",
            ModerationEventType.CLASSIFICATION_REJECTED,
            ref.uri,
            detail,
        )

    def log_classification_empty(self, ref: ObjectReference) -> None:
        """Log a classification response that carried no annotation."""
        log_warning(
            logger,
            "[%s] object=%s decision=accept",
            ModerationEventType.CLASSIFICATION_EMPTY,
            ref.uri,
        )

    def log_decision(
        self,
        ref: ObjectReference,
        *,
        remediate: bool,
        scores: SafeSearchScores | None,
    ) -> None:
        """Log the decision engine's verdict for an object."""
        event_type = (
            ModerationEventType.DECISION_REMEDIATE
            if remediate
            else ModerationEventType.DECISION_ACCEPTED
        )
        adult = scores.adult.name if scores is not None else None
        violence = scores.violence.name if scores is not None else None
        log_info(
            logger,
            "[%s] object=%s adult=%s violence=%s",
            event_type,
            ref.uri,
            adult,
            violence,
        )

    def log_transform_failed(
        self,
        ref: ObjectReference,
        *,
        source: Path,
        error: TransformError,
    ) -> None:
        """Log a failed transform with the exit status and complete stderr."""
        log_error(
            logger,
            "[%s] object=%s source=%s returncode=%s error_message=%s stderr=%r",
            ModerationEventType.TRANSFORM_FAILED,
            ref.uri,
            source,
            error.returncode,
            str(error),
            error.stderr,
            exc_info=error,
        )

    def log_remediation_completed(
        self,
        ref: ObjectReference,
        destination: ObjectReference,
    ) -> None:
        """Log a remediated object published to its destination."""
        log_info(
            logger,
            "[%s] object=%s destination=%s",
            ModerationEventType.REMEDIATION_COMPLETED,
            ref.uri,
            destination.uri,
        )

    def log_remediation_failed(
        self,
        ref: ObjectReference,
        outcome: RemediationOutcome,
    ) -> None:
        """Log a remediation run that ended in a failed outcome."""
        log_error(
            logger,
            "[%s] object=%s stage=%s fatal=%s cause=%s",
            ModerationEventType.REMEDIATION_FAILED,
            ref.uri,
            outcome.stage,
            outcome.is_fatal,
            outcome.cause,
        )

    def log_cleanup_failed(self, path: Path, error: BaseException) -> None:
        """Log a transient artifact that could not be removed."""
        log_warning(
            logger,
            "[%s] path=%s error_type=%s error_message=%s",
            ModerationEventType.CLEANUP_FAILED,
            path,
            type(error).__name__,
            str(error),
        )
