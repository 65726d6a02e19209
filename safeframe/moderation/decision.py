"""Remediation decision for classified objects.

The rule is a fixed ordinal threshold, not a probability cutoff: an object
is remediated only when adult or violent content is rated at the definite
positive level. Merely likely content is accepted.
"""

from __future__ import annotations

import enum
import typing as typ

from safeframe.safety.models import Likelihood

if typ.TYPE_CHECKING:
    from safeframe.safety.models import ClassificationResult, SafeSearchScores

DEFINITE_POSITIVE: typ.Final[Likelihood] = Likelihood.VERY_LIKELY


class Decision(enum.StrEnum):
    """Verdict of the decision engine."""

    REMEDIATE = "remediate"
    ACCEPT = "accept"


def is_definite_positive(scores: SafeSearchScores) -> bool:
    """Return True when adult or violence sits at the definite positive level."""
    return DEFINITE_POSITIVE in (scores.adult, scores.violence)


def decide(result: ClassificationResult) -> Decision:
    """Route a classification result to remediation or acceptance.

    Results without scores (an empty classification response) and results
    carrying a per-item error are accepted: absence of positive evidence
    never triggers remediation.

    Examples
    --------
    >>> from safeframe.safety.models import ClassificationResult, SafeSearchScores
    >>> decide(ClassificationResult(
    ...     uri="gs://b/k",
    ...     scores=SafeSearchScores(adult=Likelihood.VERY_LIKELY),
    ... ))
    <Decision.REMEDIATE: 'remediate'>
    >>> decide(ClassificationResult(uri="gs://b/k"))
    <Decision.ACCEPT: 'accept'>

    """
    if result.failed or result.scores is None:
        return Decision.ACCEPT
    if is_definite_positive(result.scores):
        return Decision.REMEDIATE
    return Decision.ACCEPT
