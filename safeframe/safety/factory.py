"""Factory for creating SafetyClassifier implementations from the environment."""

from __future__ import annotations

import os
import typing as typ

from safeframe.safety.errors import ClassifierConfigError
from safeframe.safety.mock import MockSafetyClassifier

if typ.TYPE_CHECKING:
    from safeframe.safety.protocol import SafetyClassifier

_VALID_BACKENDS = frozenset({"mock", "vision"})


def create_classifier() -> SafetyClassifier:
    """Create a SafetyClassifier based on environment configuration.

    Reads ``SAFEFRAME_CLASSIFIER_BACKEND`` (``mock`` or ``vision``). The
    ``vision`` backend additionally reads the variables documented on
    :meth:`VisionClassifierConfig.from_env`.

    Raises
    ------
    ClassifierConfigError
        If the backend is missing or invalid, or the Vision configuration
        is incomplete.

    Examples
    --------
    >>> import os
    >>> os.environ["SAFEFRAME_CLASSIFIER_BACKEND"] = "mock"
    >>> isinstance(create_classifier(), MockSafetyClassifier)
    True

    """
    raw_backend = os.environ.get("SAFEFRAME_CLASSIFIER_BACKEND")
    if raw_backend is None:
        raise ClassifierConfigError.missing_backend()

    backend = raw_backend.strip().lower()
    if backend not in _VALID_BACKENDS:
        raise ClassifierConfigError.invalid_backend(raw_backend, _VALID_BACKENDS)

    if backend == "mock":
        return MockSafetyClassifier()

    from safeframe.safety.config import VisionClassifierConfig
    from safeframe.safety.vision_client import VisionSafetyClassifier

    return VisionSafetyClassifier(VisionClassifierConfig.from_env())
