"""Mock implementation of SafetyClassifier for testing and development."""

from __future__ import annotations

import typing as typ

from safeframe.safety.models import ClassificationResult, Likelihood, SafeSearchScores

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from safeframe.events.models import ObjectReference

_ALL_CLEAR = SafeSearchScores(
    adult=Likelihood.VERY_UNLIKELY,
    violence=Likelihood.VERY_UNLIKELY,
    racy=Likelihood.VERY_UNLIKELY,
    medical=Likelihood.VERY_UNLIKELY,
    spoof=Likelihood.VERY_UNLIKELY,
)


class MockSafetyClassifier:
    """Deterministic classifier returning configured results by object key.

    Keys missing from ``results`` classify as very unlikely in every
    category. Every call is recorded on ``requests`` so tests can assert
    whether the classifier was reached.

    Examples
    --------
    >>> import asyncio
    >>> from safeframe.events.models import ObjectReference
    >>> classifier = MockSafetyClassifier()
    >>> result = asyncio.run(classifier.classify(ObjectReference("b", "cat.jpg")))
    >>> result.scores.adult
    <Likelihood.VERY_UNLIKELY: 1>

    """

    def __init__(
        self,
        results: cabc.Mapping[str, ClassificationResult | SafeSearchScores]
        | None = None,
        *,
        default: SafeSearchScores = _ALL_CLEAR,
    ) -> None:
        """Store canned results and the default scores."""
        self._results = dict(results or {})
        self._default = default
        self.requests: list[ObjectReference] = []

    async def classify(self, ref: ObjectReference) -> ClassificationResult:
        """Return the canned result for ``ref.key``."""
        self.requests.append(ref)
        canned = self._results.get(ref.key, self._default)
        if isinstance(canned, ClassificationResult):
            return canned
        return ClassificationResult(uri=ref.uri, scores=canned)
