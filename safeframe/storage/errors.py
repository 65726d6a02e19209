"""Object store errors."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from safeframe.events.models import ObjectReference


class ObjectStoreError(RuntimeError):
    """Base class for object store failures."""

    @classmethod
    def invalid_key(cls, key: str) -> ObjectStoreError:
        """Return an error for keys that cannot be mapped to storage."""
        return cls(f"Object key cannot be stored safely: {key!r}")

    @classmethod
    def corrupt_metadata(cls, ref: ObjectReference, detail: str) -> ObjectStoreError:
        """Return an error for a metadata record that cannot be decoded."""
        return cls(f"Metadata for {ref.uri} is unreadable: {detail}")


class ObjectNotFoundError(ObjectStoreError):
    """Raised when the requested object does not exist."""

    def __init__(self, ref: ObjectReference) -> None:
        """Initialise with the missing object's reference."""
        self.ref = ref
        super().__init__(f"Object not found: {ref.uri}")


class StorageAPIError(ObjectStoreError):
    """Raised when the storage service returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, operation: str) -> StorageAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(
            f"Storage API {operation} failed with HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def timeout(cls, operation: str) -> StorageAPIError:
        """Return an error for request timeouts."""
        return cls(f"Storage API {operation} timed out")

    @classmethod
    def network_error(cls, operation: str, detail: str) -> StorageAPIError:
        """Return an error for transport failures."""
        return cls(f"Storage API {operation} network error: {detail}")


class StorageConfigError(RuntimeError):
    """Raised when object store configuration is invalid."""

    @classmethod
    def missing_backend(cls) -> StorageConfigError:
        """Return an error when SAFEFRAME_STORE_BACKEND is not set."""
        return cls("SAFEFRAME_STORE_BACKEND environment variable is required")

    @classmethod
    def invalid_backend(cls, name: str) -> StorageConfigError:
        """Return an error for an unrecognised backend name."""
        return cls(
            f"Invalid object store backend '{name}'. "
            "Valid options are: 'filesystem', 'gcs'"
        )

    @classmethod
    def missing_root(cls) -> StorageConfigError:
        """Return an error when the filesystem store has no root directory."""
        return cls("SAFEFRAME_FILESYSTEM_STORE_ROOT is required for the filesystem store")
