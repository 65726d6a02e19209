"""Cloud Storage JSON API adapter for the ObjectStore protocol."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
import urllib.parse

import httpx

from safeframe.storage.errors import ObjectNotFoundError, StorageAPIError
from safeframe.storage.protocol import StoredObject

if typ.TYPE_CHECKING:
    from safeframe.events.models import ObjectReference

_DEFAULT_API_ENDPOINT = "https://storage.googleapis.com/storage/v1"
_DEFAULT_UPLOAD_ENDPOINT = "https://storage.googleapis.com/upload/storage/v1"
_DEFAULT_TIMEOUT_S = 60.0
_DEFAULT_CONTENT_TYPE = "application/octet-stream"

_HTTP_NOT_FOUND = 404
_HTTP_ERROR_STATUS_THRESHOLD = 400


@dataclasses.dataclass(frozen=True, slots=True)
class GCSConfig:
    """Configuration for the Cloud Storage client.

    Attributes
    ----------
    access_token
        OAuth bearer token. Requests are sent unauthenticated when unset,
        which suits emulators and public buckets.
    api_endpoint
        Base URL of the JSON API.
    upload_endpoint
        Base URL of the media upload API.
    timeout_s
        Request timeout in seconds.

    """

    access_token: str | None = None
    api_endpoint: str = _DEFAULT_API_ENDPOINT
    upload_endpoint: str = _DEFAULT_UPLOAD_ENDPOINT
    timeout_s: float = _DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls) -> GCSConfig:
        """Build configuration from environment variables.

        Reads ``SAFEFRAME_GCP_ACCESS_TOKEN``, ``SAFEFRAME_GCS_API_ENDPOINT``
        and ``SAFEFRAME_GCS_UPLOAD_ENDPOINT``.
        """
        token = (os.environ.get("SAFEFRAME_GCP_ACCESS_TOKEN") or "").strip() or None
        return cls(
            access_token=token,
            api_endpoint=os.environ.get(
                "SAFEFRAME_GCS_API_ENDPOINT", _DEFAULT_API_ENDPOINT
            ),
            upload_endpoint=os.environ.get(
                "SAFEFRAME_GCS_UPLOAD_ENDPOINT", _DEFAULT_UPLOAD_ENDPOINT
            ),
        )


def _quote(value: str) -> str:
    """Percent-encode a bucket or key for use as a single path segment."""
    return urllib.parse.quote(value, safe="")


def _content_type(response: httpx.Response) -> str | None:
    """Return the media type recorded with a downloaded object."""
    return response.headers.get("Content-Type") or None


class GCSObjectStore:
    """Read and write objects through the Cloud Storage JSON API.

    Parameters
    ----------
    config
        Client configuration.
    http_client
        Optional httpx.AsyncClient for testing. If not provided,
        the instance creates and owns its own client.

    """

    def __init__(
        self,
        config: GCSConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the store with configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._headers = (
            {"Authorization": f"Bearer {config.access_token}"}
            if config.access_token
            else {}
        )
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def get(self, ref: ObjectReference) -> StoredObject:
        """Download the object's media and content type.

        Raises
        ------
        ObjectNotFoundError
            If the service answers 404.
        StorageAPIError
            On any other error status or transport failure.

        """
        url = f"{self._config.api_endpoint}/b/{_quote(ref.bucket)}/o/{_quote(ref.key)}"
        response = await self._send(
            "download",
            self._client.build_request(
                "GET", url, params={"alt": "media"}, headers=self._headers
            ),
        )
        if response.status_code == _HTTP_NOT_FOUND:
            raise ObjectNotFoundError(ref)
        self._check_status(response, "download")
        return StoredObject(data=response.content, content_type=_content_type(response))

    async def put(
        self,
        ref: ObjectReference,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> None:
        """Upload ``data`` with a simple media upload.

        Raises
        ------
        StorageAPIError
            On an error status or transport failure.

        """
        url = f"{self._config.upload_endpoint}/b/{_quote(ref.bucket)}/o"
        headers = {
            **self._headers,
            "Content-Type": content_type or _DEFAULT_CONTENT_TYPE,
        }
        response = await self._send(
            "upload",
            self._client.build_request(
                "POST",
                url,
                params={"uploadType": "media", "name": ref.key},
                headers=headers,
                content=data,
            ),
        )
        self._check_status(response, "upload")

    async def _send(self, operation: str, request: httpx.Request) -> httpx.Response:
        try:
            return await self._client.send(request)
        except httpx.TimeoutException as exc:
            raise StorageAPIError.timeout(operation) from exc
        except httpx.RequestError as exc:
            raise StorageAPIError.network_error(operation, str(exc)) from exc

    @staticmethod
    def _check_status(response: httpx.Response, operation: str) -> None:
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise StorageAPIError.http_error(response.status_code, operation)
