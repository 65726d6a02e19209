"""Factory for creating ObjectStore implementations from the environment."""

from __future__ import annotations

import os
import pathlib
import typing as typ

from safeframe.storage.errors import StorageConfigError

if typ.TYPE_CHECKING:
    from safeframe.storage.protocol import ObjectStore


def create_object_store() -> ObjectStore:
    """Create an ObjectStore based on ``SAFEFRAME_STORE_BACKEND``.

    ``gcs`` builds a :class:`GCSObjectStore` from :meth:`GCSConfig.from_env`;
    ``filesystem`` builds a :class:`FilesystemObjectStore` rooted at
    ``SAFEFRAME_FILESYSTEM_STORE_ROOT``.

    Raises
    ------
    StorageConfigError
        If the backend is missing or invalid, or the filesystem root is unset.

    """
    raw_backend = os.environ.get("SAFEFRAME_STORE_BACKEND")
    if raw_backend is None:
        raise StorageConfigError.missing_backend()

    backend = raw_backend.strip().lower()
    if backend == "gcs":
        from safeframe.storage.gcs import GCSConfig, GCSObjectStore

        return GCSObjectStore(GCSConfig.from_env())

    if backend == "filesystem":
        from safeframe.storage.filesystem import FilesystemObjectStore

        root = os.environ.get("SAFEFRAME_FILESYSTEM_STORE_ROOT")
        if not root:
            raise StorageConfigError.missing_root()
        return FilesystemObjectStore(pathlib.Path(root))

    raise StorageConfigError.invalid_backend(raw_backend)
