"""ObjectStore protocol for reading and writing stored objects.

This module defines the port for object storage. Adapters implement it
for the cloud storage JSON API and for a local directory tree.

The protocol is ``runtime_checkable`` to support ``isinstance`` checks
for dependency injection and testing scenarios.

Usage
-----
Type-check a concrete adapter:

>>> from pathlib import Path
>>> from safeframe.storage.filesystem import FilesystemObjectStore
>>> isinstance(FilesystemObjectStore(Path(".")), ObjectStore)
True

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from safeframe.events.models import ObjectReference


@dc.dataclass(frozen=True, slots=True)
class StoredObject:
    """Bytes of a stored object together with its content type.

    Attributes
    ----------
    data
        Object contents.
    content_type
        MIME type recorded with the object, when the store has one.

    """

    data: bytes
    content_type: str | None = None


@typ.runtime_checkable
class ObjectStore(typ.Protocol):
    """Protocol for synchronous-per-call object reads and writes."""

    async def get(self, ref: ObjectReference) -> StoredObject:
        """Fetch the object named by ``ref``.

        Raises
        ------
        ObjectNotFoundError
            If the object does not exist.
        ObjectStoreError
            If the store cannot complete the read.

        """
        ...

    async def put(
        self,
        ref: ObjectReference,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> None:
        """Write ``data`` at ``ref`` with the given content type.

        Raises
        ------
        ObjectStoreError
            If the store cannot complete the write.

        """
        ...
