"""Classification result structures for safe-search annotation."""

from __future__ import annotations

import enum

import msgspec


class Likelihood(enum.IntEnum):
    """Ordinal likelihood scale used by the safe-search classifier.

    Values match the classification service's wire enumeration, so integer
    and name forms decode to the same member.
    """

    UNKNOWN = 0
    VERY_UNLIKELY = 1
    UNLIKELY = 2
    POSSIBLE = 3
    LIKELY = 4
    VERY_LIKELY = 5

    @classmethod
    def parse(cls, value: str | int | None) -> Likelihood:
        """Parse a wire value, mapping anything unrecognised to ``UNKNOWN``.

        Examples
        --------
        >>> Likelihood.parse("VERY_LIKELY")
        <Likelihood.VERY_LIKELY: 5>
        >>> Likelihood.parse(3)
        <Likelihood.POSSIBLE: 3>

        """
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.UNKNOWN
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper(), cls.UNKNOWN)
        return cls.UNKNOWN


class SafeSearchScores(msgspec.Struct, kw_only=True, frozen=True):
    """Per-category likelihoods for one image.

    Only ``adult`` and ``violence`` drive remediation; the remaining
    categories are carried for logging.
    """

    adult: Likelihood = Likelihood.UNKNOWN
    violence: Likelihood = Likelihood.UNKNOWN
    racy: Likelihood = Likelihood.UNKNOWN
    medical: Likelihood = Likelihood.UNKNOWN
    spoof: Likelihood = Likelihood.UNKNOWN


class ClassificationResult(msgspec.Struct, kw_only=True, frozen=True):
    """Outcome of classifying one object.

    Attributes
    ----------
    uri
        Canonical URI of the classified object.
    scores
        Safe-search scores, or ``None`` when the service returned no
        annotation for the object.
    error
        Per-item error detail reported by the service, if any.

    """

    uri: str
    scores: SafeSearchScores | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Return True when the service reported a per-item error."""
        return self.error is not None

    @property
    def annotated(self) -> bool:
        """Return True when the result carries scores."""
        return self.scores is not None
