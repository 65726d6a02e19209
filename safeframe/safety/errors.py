"""Custom exceptions for safe-search classification."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# Content preview length for error messages
_CONTENT_PREVIEW_LIMIT = 100


class ClassificationError(Exception):
    """Raised when a classification call cannot complete.

    This is the single catch point for transport, HTTP, and response shape
    failures. Per-item errors reported by the service are not exceptions;
    they are carried on :class:`~safeframe.safety.models.ClassificationResult`.
    """


class VisionAPIError(ClassificationError):
    """Raised when the Vision API request fails or returns an error status.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if available.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise the error with message and optional status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> VisionAPIError:
        """Create error for HTTP error responses."""
        return cls(f"Vision API HTTP error {status_code}", status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after: int | None = None) -> VisionAPIError:
        """Create error for rate limit (429) responses.

        Parameters
        ----------
        retry_after
            Seconds to wait before retrying, from the Retry-After header.

        Returns
        -------
        VisionAPIError
            Error indicating rate limiting.

        """
        msg = "Vision API rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after}s"
        return cls(msg, status_code=429)

    @classmethod
    def timeout(cls) -> VisionAPIError:
        """Create error for request timeouts."""
        return cls("Vision API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> VisionAPIError:
        """Create error for network failures (DNS, connection, TLS, etc.)."""
        return cls(f"Vision API network error: {detail}")


class VisionResponseShapeError(ClassificationError):
    """Raised when a Vision API response body cannot be decoded."""

    @classmethod
    def invalid_json(cls, content: str) -> VisionResponseShapeError:
        """Create error for invalid JSON with a truncated content preview."""
        if len(content) > _CONTENT_PREVIEW_LIMIT:
            preview = content[:_CONTENT_PREVIEW_LIMIT] + "..."
        else:
            preview = content
        return cls(f"Failed to parse Vision API response: {preview}")


class ClassifierConfigError(Exception):
    """Raised when classifier configuration is invalid."""

    @classmethod
    def missing_credentials(cls) -> ClassifierConfigError:
        """Create error when neither an API key nor an access token is set."""
        return cls(
            "SAFEFRAME_VISION_API_KEY or SAFEFRAME_GCP_ACCESS_TOKEN "
            "environment variable is required"
        )

    @classmethod
    def missing_backend(cls) -> ClassifierConfigError:
        """Create error when SAFEFRAME_CLASSIFIER_BACKEND is not set."""
        return cls("SAFEFRAME_CLASSIFIER_BACKEND environment variable is required")

    @classmethod
    def invalid_backend(
        cls, name: str, valid_backends: cabc.Iterable[str]
    ) -> ClassifierConfigError:
        """Create error for an unrecognised backend name, listing valid options."""
        valid_backends_str = ", ".join(f"'{b}'" for b in sorted(valid_backends))
        return cls(
            f"Invalid classifier backend '{name}'. "
            f"Valid options are: {valid_backends_str}"
        )

    @classmethod
    def invalid_timeout(cls, value: str) -> ClassifierConfigError:
        """Create error for a timeout that is not a positive number."""
        return cls(f"Invalid timeout '{value}'. Must be a positive number of seconds")
