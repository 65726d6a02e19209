"""Decision engine and the moderation service."""

from __future__ import annotations

from .decision import DEFINITE_POSITIVE, Decision, decide, is_definite_positive
from .service import (
    ModerationOutcome,
    ModerationResult,
    ModerationService,
    build_moderation_service,
)

__all__ = [
    "DEFINITE_POSITIVE",
    "Decision",
    "ModerationOutcome",
    "ModerationResult",
    "ModerationService",
    "build_moderation_service",
    "decide",
    "is_definite_positive",
]
