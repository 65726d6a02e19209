"""Errors raised by the remediation stages."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from safeframe.remediation.pipeline import RemediationOutcome

# Stderr from image tools can be long; keep messages bounded.
_STDERR_PREVIEW_LIMIT = 500


class RemediationStageError(Exception):
    """Base class for remediation failures."""


class TransformError(RemediationStageError):
    """Raised when the external transform does not produce an artifact.

    Attributes
    ----------
    returncode
        Exit status of the transform process, if it ran.
    stderr
        Captured standard error of the transform process.

    """

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        """Initialise with a message and the process's exit details."""
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    @classmethod
    def exited(cls, returncode: int, stderr: str) -> TransformError:
        """Return an error for a transform that exited abnormally."""
        preview = stderr.strip()
        if len(preview) > _STDERR_PREVIEW_LIMIT:
            preview = preview[:_STDERR_PREVIEW_LIMIT] + "..."
        return cls(
            f"Transform exited with status {returncode}: {preview}",
            returncode=returncode,
            stderr=stderr,
        )

    @classmethod
    def missing_output(cls, destination: Path, stderr: str = "") -> TransformError:
        """Return an error for a clean exit that left no output artifact."""
        return cls(
            f"Transform exited cleanly but produced no output at {destination}",
            returncode=0,
            stderr=stderr,
        )

    @classmethod
    def spawn_failed(cls, command: str, detail: str) -> TransformError:
        """Return an error for a transform process that could not start."""
        return cls(f"Transform command {command!r} could not start: {detail}")


class RemediationError(RemediationStageError):
    """Raised when remediation fails at a stage that warrants redelivery.

    Carries the outcome so callers can report the failing stage.
    """

    def __init__(self, outcome: RemediationOutcome) -> None:
        """Initialise from a failed remediation outcome."""
        self.outcome = outcome
        super().__init__(
            f"Remediation failed at stage {outcome.stage}: {outcome.cause}"
        )
