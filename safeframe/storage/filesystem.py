r"""Filesystem adapter for the ObjectStore protocol.

Lays objects out under a root directory, one subdirectory per bucket::

    {root}/{bucket}/{key}
    {root}/{bucket}/{key}.metadata.json

The metadata sidecar records the content type so it survives a round trip
through the store, as it would with the cloud service.

Usage
-----
>>> import asyncio
>>> from pathlib import Path
>>> from safeframe.events.models import ObjectReference
>>> store = FilesystemObjectStore(Path("/var/lib/safeframe/objects"))
>>> ref = ObjectReference("blurred", "cats/tabby.jpg")
>>> asyncio.run(store.put(ref, b"...", content_type="image/jpeg"))

"""

from __future__ import annotations

import asyncio
import pathlib
import typing as typ

import msgspec

from safeframe.storage.errors import ObjectNotFoundError, ObjectStoreError
from safeframe.storage.protocol import StoredObject

if typ.TYPE_CHECKING:
    from safeframe.events.models import ObjectReference

_METADATA_SUFFIX = ".metadata.json"


class _ObjectMetadata(msgspec.Struct, kw_only=True):
    content_type: str | None = None


def _relative_key_path(key: str) -> pathlib.PurePosixPath:
    """Map an object key onto a relative path that stays inside its bucket."""
    # Checked on raw segments: PurePosixPath silently collapses "a//b" and "a/./b".
    segments = key.split("/")
    if any(segment in {"", ".", ".."} for segment in segments):
        raise ObjectStoreError.invalid_key(key)
    if segments[-1].endswith(_METADATA_SUFFIX):
        raise ObjectStoreError.invalid_key(key)
    return pathlib.PurePosixPath(*segments)


class FilesystemObjectStore:
    """Store objects in a local directory tree.

    Parameters
    ----------
    root
        Directory holding one subdirectory per bucket. Bucket directories
        are created on first write.

    """

    def __init__(self, root: pathlib.Path) -> None:
        """Initialise the store with its root directory."""
        self._root = root

    @property
    def root(self) -> pathlib.Path:
        """Root directory of the store."""
        return self._root

    def path_for(self, ref: ObjectReference) -> pathlib.Path:
        """Return the local path holding the object's bytes."""
        if pathlib.PurePosixPath(ref.bucket).name != ref.bucket or ref.bucket in {
            ".",
            "..",
        }:
            raise ObjectStoreError.invalid_key(ref.bucket)
        return self._root / ref.bucket / _relative_key_path(ref.key)

    def _metadata_path(self, path: pathlib.Path) -> pathlib.Path:
        return path.with_name(path.name + _METADATA_SUFFIX)

    async def get(self, ref: ObjectReference) -> StoredObject:
        """Read the object and its recorded content type.

        Raises
        ------
        ObjectNotFoundError
            If the object does not exist.
        ObjectStoreError
            If the metadata sidecar cannot be decoded.

        """
        path = self.path_for(ref)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(ref) from exc

        metadata_path = self._metadata_path(path)
        try:
            raw_metadata = await asyncio.to_thread(metadata_path.read_bytes)
        except FileNotFoundError:
            return StoredObject(data=data)
        try:
            metadata = msgspec.json.decode(raw_metadata, type=_ObjectMetadata)
        except msgspec.DecodeError as exc:
            raise ObjectStoreError.corrupt_metadata(ref, str(exc)) from exc
        return StoredObject(data=data, content_type=metadata.content_type)

    async def put(
        self,
        ref: ObjectReference,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> None:
        """Write the object and its metadata sidecar."""
        path = self.path_for(ref)
        await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_bytes, data)
        metadata = msgspec.json.encode(_ObjectMetadata(content_type=content_type))
        await asyncio.to_thread(self._metadata_path(path).write_bytes, metadata)
