"""External image transform executors.

The blur is performed by ImageMagick's ``convert`` as a separate process
invoked with a fixed argument list::

    convert <source> -blur 0x8 <destination>

The pipeline awaits the process exactly once, so timing is the same as a
blocking call; only the event loop stays free while it runs. A cancelled
wait kills the process before the cancellation propagates, so no output
appears after the caller has cleaned up.
"""

from __future__ import annotations

import asyncio
import contextlib
import typing as typ

from safeframe.remediation.errors import TransformError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

BLUR_ARGUMENT = "0x8"
DEFAULT_CONVERT_COMMAND: tuple[str, ...] = ("convert",)


@typ.runtime_checkable
class TransformExecutor(typ.Protocol):
    """Protocol for transforms that read one file and write another."""

    async def transform(self, source: Path, destination: Path) -> None:
        """Transform ``source`` into ``destination``.

        Raises
        ------
        TransformError
            If the transform fails or produces no artifact at ``destination``.

        """
        ...


def blur_arguments(source: Path, destination: Path) -> list[str]:
    """Return the positional arguments for a blur of ``source``.

    Examples
    --------
    >>> from pathlib import Path
    >>> blur_arguments(Path("/tmp/in.jpg"), Path("/tmp/out.jpg"))
    ['/tmp/in.jpg', '-blur', '0x8', '/tmp/out.jpg']

    """
    return [str(source), "-blur", BLUR_ARGUMENT, str(destination)]


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill ``process`` if it is still running and reap it."""
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
    await asyncio.shield(process.wait())


class ImageMagickBlur:
    """Blur images by running ImageMagick as an external process.

    Parameters
    ----------
    command
        Executable and any leading arguments placed before the blur
        arguments. Defaults to ``("convert",)``.

    """

    def __init__(self, command: cabc.Sequence[str] = DEFAULT_CONVERT_COMMAND) -> None:
        """Store the command prefix."""
        if not command:
            msg = "transform command must name an executable"
            raise ValueError(msg)
        self._command = tuple(command)

    @property
    def command(self) -> tuple[str, ...]:
        """Command prefix used for every invocation."""
        return self._command

    async def transform(self, source: Path, destination: Path) -> None:
        """Blur ``source`` into ``destination`` and wait for completion."""
        argv = [*self._command, *blur_arguments(source, destination)]
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TransformError.spawn_failed(self._command[0], str(exc)) from exc

        try:
            _, raw_stderr = await process.communicate()
        except BaseException:
            # The child must not outlive the invocation that owns its output.
            await _terminate(process)
            raise
        stderr = (raw_stderr or b"").decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise TransformError.exited(
                process.returncode if process.returncode is not None else -1, stderr
            )
        if not await asyncio.to_thread(destination.is_file):
            raise TransformError.missing_output(destination, stderr)
