"""Remediation of unsafe objects: blur and re-publish."""

from __future__ import annotations

from .errors import RemediationError, RemediationStageError, TransformError
from .pipeline import (
    CleanupReport,
    RemediationOutcome,
    RemediationPipeline,
    RemediationStage,
    RemediationStatus,
    TransientArtifacts,
    remove_artifacts,
)
from .transform import (
    BLUR_ARGUMENT,
    ImageMagickBlur,
    TransformExecutor,
    blur_arguments,
)

__all__ = [
    "BLUR_ARGUMENT",
    "CleanupReport",
    "ImageMagickBlur",
    "RemediationError",
    "RemediationOutcome",
    "RemediationPipeline",
    "RemediationStage",
    "RemediationStageError",
    "RemediationStatus",
    "TransformError",
    "TransformExecutor",
    "TransientArtifacts",
    "blur_arguments",
    "remove_artifacts",
]
