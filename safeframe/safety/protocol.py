"""SafetyClassifier protocol for safe-search annotation."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from safeframe.events.models import ObjectReference
    from safeframe.safety.models import ClassificationResult


@typ.runtime_checkable
class SafetyClassifier(typ.Protocol):
    """Protocol for classifying a stored image for unsafe content.

    Implementations issue exactly one request per call and never retry;
    redelivery is left to the delivery platform.

    Examples
    --------
    >>> from safeframe.safety import MockSafetyClassifier, SafetyClassifier
    >>> isinstance(MockSafetyClassifier(), SafetyClassifier)
    True

    """

    async def classify(self, ref: ObjectReference) -> ClassificationResult:
        """Classify the object named by ``ref``.

        Returns
        -------
        ClassificationResult
            Scores for the object, or the service's per-item error.

        Raises
        ------
        ClassificationError
            If the remote call cannot complete.

        """
        ...
