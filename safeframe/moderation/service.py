"""Moderation service composing the guard, classifier, and remediation.

``ModerationService`` is the single entry point every delivery adapter
(Falcon push endpoints, Dramatiq actors, tests) calls. It owns no
per-invocation state: the collaborators are built once per process and
everything an invocation learns lives in local variables and the returned
:class:`ModerationResult`.

Usage
-----
>>> service = build_moderation_service()
>>> result = asyncio.run(service.handle_storage_event(event))
>>> result.outcome
<ModerationOutcome.ACCEPTED: 'accepted'>

"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from safeframe.events.errors import MalformedEventError
from safeframe.events.models import decode_storage_event
from safeframe.events.staleness import StalenessGuard
from safeframe.moderation.decision import Decision, decide
from safeframe.observability import ModerationEventLogger
from safeframe.remediation.errors import RemediationError
from safeframe.remediation.pipeline import RemediationOutcome, RemediationStatus
from safeframe.safety.errors import ClassificationError

if typ.TYPE_CHECKING:
    from safeframe.events.models import InboundEvent, ObjectReference
    from safeframe.remediation.pipeline import RemediationPipeline
    from safeframe.safety.models import ClassificationResult
    from safeframe.safety.protocol import SafetyClassifier

__all__ = [
    "ModerationOutcome",
    "ModerationResult",
    "ModerationService",
    "build_moderation_service",
]


class ModerationOutcome(enum.StrEnum):
    """How a storage-trigger invocation ended."""

    DROPPED = "dropped"
    MALFORMED = "malformed"
    CLASSIFICATION_REJECTED = "classification_rejected"
    ACCEPTED = "accepted"
    REMEDIATED = "remediated"
    REMEDIATION_FAILED = "remediation_failed"


@dc.dataclass(frozen=True, slots=True)
class ModerationResult:
    """Summary of one storage-trigger invocation.

    Attributes
    ----------
    outcome
        Terminal outcome of the invocation.
    ref
        Object the event referred to, once decoded.
    classification
        Classifier result, when classification ran.
    decision
        Decision engine verdict, when one was reached.
    remediation
        Pipeline outcome; ``skipped`` for accepted objects.

    """

    outcome: ModerationOutcome
    ref: ObjectReference | None = None
    classification: ClassificationResult | None = None
    decision: Decision | None = None
    remediation: RemediationOutcome | None = None


class ModerationService:
    """Handle inbound events end to end.

    Parameters
    ----------
    classifier
        Safe-search classifier consulted for every fresh, well-formed event.
    pipeline
        Remediation pipeline run for objects the decision engine flags.
    guard
        Staleness guard; a default guard sharing ``event_logger`` is built
        when omitted.
    event_logger
        Receiver for structured moderation records.

    """

    def __init__(
        self,
        *,
        classifier: SafetyClassifier,
        pipeline: RemediationPipeline,
        guard: StalenessGuard | None = None,
        event_logger: ModerationEventLogger | None = None,
    ) -> None:
        """Bind the service to its collaborators."""
        self._classifier = classifier
        self._pipeline = pipeline
        self._event_logger = event_logger or ModerationEventLogger()
        self._guard = guard or StalenessGuard(event_logger=self._event_logger)

    async def handle_message(self, event: InboundEvent) -> bool:
        """Apply only the staleness guard to a message delivery.

        Returns
        -------
        bool
            ``True`` when the message was processed, ``False`` when dropped.

        """
        return self._guard.should_process(event)

    async def handle_storage_event(self, event: InboundEvent) -> ModerationResult:
        """Moderate the object named by a storage change event.

        Raises
        ------
        ClassificationError
            If the classification call cannot complete.
        RemediationError
            If remediation fails at the download or upload stage.

        """
        if not self._guard.should_process(event):
            return ModerationResult(outcome=ModerationOutcome.DROPPED)

        try:
            ref = decode_storage_event(event).object_reference()
        except MalformedEventError as exc:
            self._event_logger.log_event_malformed(event, reason=str(exc))
            return ModerationResult(outcome=ModerationOutcome.MALFORMED)

        classification = await self._classify(ref)
        if classification.failed:
            self._event_logger.log_classification_rejected(
                ref, detail=classification.error or ""
            )
            return ModerationResult(
                outcome=ModerationOutcome.CLASSIFICATION_REJECTED,
                ref=ref,
                classification=classification,
            )

        if classification.scores is None:
            self._event_logger.log_classification_empty(ref)

        decision = decide(classification)
        self._event_logger.log_decision(
            ref,
            remediate=decision is Decision.REMEDIATE,
            scores=classification.scores,
        )
        if decision is Decision.ACCEPT:
            return ModerationResult(
                outcome=ModerationOutcome.ACCEPTED,
                ref=ref,
                classification=classification,
                decision=decision,
                remediation=RemediationOutcome.skipped(),
            )

        remediation = await self._pipeline.remediate(ref)
        return self._conclude(ref, classification, remediation)

    async def _classify(self, ref: ObjectReference) -> ClassificationResult:
        self._event_logger.log_classification_started(ref)
        try:
            return await self._classifier.classify(ref)
        except ClassificationError as exc:
            self._event_logger.log_classification_failed(ref, exc)
            raise

    def _conclude(
        self,
        ref: ObjectReference,
        classification: ClassificationResult,
        remediation: RemediationOutcome,
    ) -> ModerationResult:
        if remediation.status is RemediationStatus.SUCCESS:
            if remediation.destination is not None:
                self._event_logger.log_remediation_completed(
                    ref, remediation.destination
                )
            outcome = ModerationOutcome.REMEDIATED
        else:
            self._event_logger.log_remediation_failed(ref, remediation)
            if remediation.is_fatal:
                raise RemediationError(remediation)
            outcome = ModerationOutcome.REMEDIATION_FAILED

        return ModerationResult(
            outcome=outcome,
            ref=ref,
            classification=classification,
            decision=Decision.REMEDIATE,
            remediation=remediation,
        )


def build_moderation_service() -> ModerationService:
    """Build a ``ModerationService`` from environment configuration.

    Reads :meth:`ModerationConfig.from_env` and the classifier and object
    store backends selected by their factories.

    Raises
    ------
    ModerationConfigError
        If the destination bucket is not configured.
    ClassifierConfigError
        If the classifier backend is missing or incomplete.
    StorageConfigError
        If the object store backend is missing or incomplete.

    """
    from safeframe.config import ModerationConfig
    from safeframe.remediation.pipeline import RemediationPipeline
    from safeframe.remediation.transform import ImageMagickBlur
    from safeframe.safety.factory import create_classifier
    from safeframe.storage.factory import create_object_store

    config = ModerationConfig.from_env()
    event_logger = ModerationEventLogger()
    pipeline = RemediationPipeline(
        source_store=create_object_store(),
        transform=ImageMagickBlur(config.convert_command),
        destination_bucket=config.blurred_bucket,
        scratch_dir=config.scratch_dir,
        event_logger=event_logger,
    )
    return ModerationService(
        classifier=create_classifier(),
        pipeline=pipeline,
        event_logger=event_logger,
    )
