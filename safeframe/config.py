"""Process-level configuration for the moderation service."""

from __future__ import annotations

import dataclasses
import os
import shlex
import tempfile
from pathlib import Path

from safeframe.remediation.transform import DEFAULT_CONVERT_COMMAND


class ModerationConfigError(RuntimeError):
    """Raised when moderation configuration is invalid."""

    @classmethod
    def missing_blurred_bucket(cls) -> ModerationConfigError:
        """Return an error when no destination bucket is configured."""
        return cls("SAFEFRAME_BLURRED_BUCKET_NAME environment variable is required")

    @classmethod
    def empty_convert_command(cls) -> ModerationConfigError:
        """Return an error for a blank transform command."""
        return cls("SAFEFRAME_CONVERT_COMMAND must name an executable")


@dataclasses.dataclass(frozen=True, slots=True)
class ModerationConfig:
    """Read-only settings established once at process start.

    Attributes
    ----------
    blurred_bucket
        Bucket receiving remediated objects.
    scratch_dir
        Directory for per-invocation transient artifacts.
    convert_command
        Command prefix for the blur executor.

    """

    blurred_bucket: str
    scratch_dir: Path = dataclasses.field(
        default_factory=lambda: Path(tempfile.gettempdir())
    )
    convert_command: tuple[str, ...] = DEFAULT_CONVERT_COMMAND

    @classmethod
    def from_env(cls) -> ModerationConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``SAFEFRAME_BLURRED_BUCKET_NAME``: Required destination bucket
        - ``SAFEFRAME_SCRATCH_DIR``: Optional scratch directory
          (default: the system temporary directory)
        - ``SAFEFRAME_CONVERT_COMMAND``: Optional shell-quoted command prefix
          for the blur executor (default: ``convert``)

        Raises
        ------
        ModerationConfigError
            If the bucket is missing or the command is blank.

        """
        bucket = (os.environ.get("SAFEFRAME_BLURRED_BUCKET_NAME") or "").strip()
        if not bucket:
            raise ModerationConfigError.missing_blurred_bucket()

        raw_scratch = os.environ.get("SAFEFRAME_SCRATCH_DIR")
        scratch_dir = Path(raw_scratch) if raw_scratch else Path(tempfile.gettempdir())

        raw_command = os.environ.get("SAFEFRAME_CONVERT_COMMAND")
        if raw_command is None:
            command = DEFAULT_CONVERT_COMMAND
        else:
            command = tuple(shlex.split(raw_command))
            if not command:
                raise ModerationConfigError.empty_convert_command()

        return cls(
            blurred_bucket=bucket,
            scratch_dir=scratch_dir,
            convert_command=command,
        )
