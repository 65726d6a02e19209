"""Safe-search classification of stored images."""

from __future__ import annotations

from .config import VisionClassifierConfig
from .errors import (
    ClassificationError,
    ClassifierConfigError,
    VisionAPIError,
    VisionResponseShapeError,
)
from .factory import create_classifier
from .mock import MockSafetyClassifier
from .models import ClassificationResult, Likelihood, SafeSearchScores
from .protocol import SafetyClassifier
from .vision_client import VisionSafetyClassifier, build_annotate_request

__all__ = [
    "ClassificationError",
    "ClassificationResult",
    "ClassifierConfigError",
    "Likelihood",
    "MockSafetyClassifier",
    "SafeSearchScores",
    "SafetyClassifier",
    "VisionAPIError",
    "VisionClassifierConfig",
    "VisionResponseShapeError",
    "VisionSafetyClassifier",
    "build_annotate_request",
    "create_classifier",
]
