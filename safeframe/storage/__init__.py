"""Object storage port and adapters."""

from __future__ import annotations

from .errors import (
    ObjectNotFoundError,
    ObjectStoreError,
    StorageAPIError,
    StorageConfigError,
)
from .factory import create_object_store
from .filesystem import FilesystemObjectStore
from .gcs import GCSConfig, GCSObjectStore
from .protocol import ObjectStore, StoredObject

__all__ = [
    "FilesystemObjectStore",
    "GCSConfig",
    "GCSObjectStore",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
    "StorageAPIError",
    "StorageConfigError",
    "StoredObject",
    "create_object_store",
]
