"""Download, blur, and re-publish objects flagged as unsafe.

A remediation run is a strict sequence of four stages:

1. **Download** the source object into a transient local file.
2. **Transform** it with the external blur executor into a second file.
3. **Upload** the result to the destination bucket under the same key,
   keeping the source content type.
4. **Cleanup** both transient files.

Stage failures are reported as :class:`RemediationOutcome` values rather
than exceptions, and cleanup runs from the ``finally`` of an async context
manager, so it executes exactly once whichever stage fails and however the
failure is represented. Unexpected exceptions still propagate after
cleanup has run.

Usage
-----
>>> pipeline = RemediationPipeline(
...     source_store=store,
...     transform=ImageMagickBlur(),
...     destination_bucket="blurred",
...     scratch_dir=Path("/tmp"),
... )
>>> outcome = asyncio.run(pipeline.remediate(ObjectReference("uploads", "a.jpg")))

"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import enum
import typing as typ
import uuid

from safeframe.common.naming import scratch_file_name
from safeframe.events.models import ObjectReference
from safeframe.observability import ModerationEventLogger
from safeframe.remediation.errors import TransformError
from safeframe.storage.errors import ObjectStoreError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from safeframe.remediation.transform import TransformExecutor
    from safeframe.storage.protocol import ObjectStore

_OUTPUT_PREFIX = "blurred-"


class RemediationStatus(enum.StrEnum):
    """Terminal status of a remediation run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class RemediationStage(enum.StrEnum):
    """Stages of a remediation run, in execution order."""

    DOWNLOAD = "download"
    TRANSFORM = "transform"
    UPLOAD = "upload"
    CLEANUP = "cleanup"


# Failures at these stages should be redelivered by the platform.
_FATAL_STAGES = frozenset({RemediationStage.DOWNLOAD, RemediationStage.UPLOAD})


@dataclasses.dataclass(frozen=True, slots=True)
class RemediationOutcome:
    """Result of one remediation run.

    Attributes
    ----------
    status
        Success, skipped (object was safe), or failed.
    stage
        Stage that failed, for failed outcomes.
    cause
        Human-readable failure cause, for failed outcomes.
    destination
        Where the remediated object was published, for successful outcomes.
    error
        Exception that caused the failure, kept for logging.
    cleanup
        What the cleanup stage removed, attached once cleanup has run.

    """

    status: RemediationStatus
    stage: RemediationStage | None = None
    cause: str | None = None
    destination: ObjectReference | None = None
    error: BaseException | None = dataclasses.field(default=None, compare=False)
    cleanup: CleanupReport | None = dataclasses.field(default=None, compare=False)

    @classmethod
    def succeeded(cls, destination: ObjectReference) -> RemediationOutcome:
        """Return the outcome for an object published to ``destination``."""
        return cls(status=RemediationStatus.SUCCESS, destination=destination)

    @classmethod
    def skipped(cls) -> RemediationOutcome:
        """Return the outcome for an object that needed no remediation."""
        return cls(status=RemediationStatus.SKIPPED)

    @classmethod
    def failed(
        cls, stage: RemediationStage, error: BaseException
    ) -> RemediationOutcome:
        """Return the outcome for a run that failed at ``stage``."""
        return cls(
            status=RemediationStatus.FAILED,
            stage=stage,
            cause=str(error) or type(error).__name__,
            error=error,
        )

    @property
    def is_fatal(self) -> bool:
        """Return True for failures the platform should redeliver."""
        return self.status is RemediationStatus.FAILED and self.stage in _FATAL_STAGES


@dataclasses.dataclass(frozen=True, slots=True)
class CleanupReport:
    """Transient files removed, and those that could not be removed."""

    removed: tuple[Path, ...] = ()
    failed: tuple[Path, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class TransientArtifacts:
    """Local files owned by one remediation run.

    Both names embed a random token and the flattened object key, so
    concurrent runs sharing a scratch directory never collide, even on the
    same key.
    """

    download: Path
    output: Path

    @classmethod
    def allocate(cls, scratch_dir: Path, key: str) -> TransientArtifacts:
        """Reserve unique artifact paths for ``key`` under ``scratch_dir``."""
        token = uuid.uuid4().hex
        return cls(
            download=scratch_dir / scratch_file_name(key, token),
            output=scratch_dir / scratch_file_name(key, token, prefix=_OUTPUT_PREFIX),
        )

    def paths(self) -> tuple[Path, Path]:
        """Return both artifact paths, download first."""
        return (self.download, self.output)


@dataclasses.dataclass(slots=True)
class _ArtifactScope:
    artifacts: TransientArtifacts
    report: CleanupReport | None = None


async def remove_artifacts(
    artifacts: TransientArtifacts,
    *,
    on_error: cabc.Callable[[Path, OSError], None],
) -> CleanupReport:
    """Delete whichever artifacts exist, reporting failures to ``on_error``.

    Never raises for filesystem errors: a file that cannot be removed is
    reported and recorded as failed, even when ``on_error`` itself raises.
    """
    removed: list[Path] = []
    failed: list[Path] = []
    for path in artifacts.paths():
        try:
            if not await asyncio.to_thread(path.exists):
                continue
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            # Reporting a cleanup failure never escalates it.
            with contextlib.suppress(Exception):
                on_error(path, exc)
            failed.append(path)
        else:
            removed.append(path)
    return CleanupReport(removed=tuple(removed), failed=tuple(failed))


class RemediationPipeline:
    """Run the download, transform, upload, and cleanup stages for one object.

    Parameters
    ----------
    source_store
        Store the flagged object is read from.
    transform
        Executor producing the blurred artifact.
    destination_bucket
        Bucket receiving remediated objects.
    scratch_dir
        Directory for transient artifacts; created if missing.
    destination_store
        Store receiving remediated objects. Defaults to ``source_store``.
    event_logger
        Receiver for transform and cleanup failure records.

    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        source_store: ObjectStore,
        transform: TransformExecutor,
        destination_bucket: str,
        scratch_dir: Path,
        destination_store: ObjectStore | None = None,
        event_logger: ModerationEventLogger | None = None,
    ) -> None:
        """Bind the pipeline to its collaborators."""
        self._source_store = source_store
        self._destination_store = destination_store or source_store
        self._transform = transform
        self._destination_bucket = destination_bucket
        self._scratch_dir = scratch_dir
        self._event_logger = event_logger or ModerationEventLogger()

    @property
    def destination_bucket(self) -> str:
        """Bucket receiving remediated objects."""
        return self._destination_bucket

    async def remediate(self, ref: ObjectReference) -> RemediationOutcome:
        """Remediate ``ref`` and return the run's outcome.

        Transient artifacts are removed before this coroutine returns or
        raises, on every path.
        """
        async with self._transient_artifacts(ref.key) as scope:
            outcome = await self._run_stages(ref, scope.artifacts)
        return dataclasses.replace(outcome, cleanup=scope.report)

    @contextlib.asynccontextmanager
    async def _transient_artifacts(
        self, key: str
    ) -> cabc.AsyncIterator[_ArtifactScope]:
        scope = _ArtifactScope(TransientArtifacts.allocate(self._scratch_dir, key))
        try:
            yield scope
        finally:
            scope.report = await self._cleanup(scope.artifacts)

    async def _cleanup(self, artifacts: TransientArtifacts) -> CleanupReport:
        return await remove_artifacts(
            artifacts, on_error=self._event_logger.log_cleanup_failed
        )

    async def _run_stages(
        self,
        ref: ObjectReference,
        artifacts: TransientArtifacts,
    ) -> RemediationOutcome:
        try:
            content_type = await self._download(ref, artifacts.download)
        except (ObjectStoreError, OSError) as exc:
            return RemediationOutcome.failed(RemediationStage.DOWNLOAD, exc)

        try:
            await self._transform.transform(artifacts.download, artifacts.output)
        except TransformError as exc:
            self._event_logger.log_transform_failed(
                ref, source=artifacts.download, error=exc
            )
            return RemediationOutcome.failed(RemediationStage.TRANSFORM, exc)

        destination = ObjectReference(bucket=self._destination_bucket, key=ref.key)
        try:
            await self._upload(artifacts.output, destination, content_type)
        except (ObjectStoreError, OSError) as exc:
            return RemediationOutcome.failed(RemediationStage.UPLOAD, exc)

        return RemediationOutcome.succeeded(destination)

    async def _download(self, ref: ObjectReference, target: Path) -> str | None:
        """Fetch ``ref`` into ``target`` and return its content type."""
        stored = await self._source_store.get(ref)
        await asyncio.to_thread(self._scratch_dir.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, stored.data)
        return stored.content_type

    async def _upload(
        self,
        source: Path,
        destination: ObjectReference,
        content_type: str | None,
    ) -> None:
        data = await asyncio.to_thread(source.read_bytes)
        await self._destination_store.put(destination, data, content_type=content_type)
