"""Vision API implementation of the SafetyClassifier protocol."""

from __future__ import annotations

import typing as typ

import httpx
import msgspec

from safeframe.safety.errors import (
    ClassifierConfigError,
    VisionAPIError,
    VisionResponseShapeError,
)
from safeframe.safety.models import ClassificationResult, Likelihood, SafeSearchScores

if typ.TYPE_CHECKING:
    from safeframe.events.models import ObjectReference
    from safeframe.safety.config import VisionClassifierConfig

SAFE_SEARCH_FEATURE = "SAFE_SEARCH_DETECTION"

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_RATE_LIMITED = 429


def _get_retry_after(response: httpx.Response) -> int | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    return None


class _Status(msgspec.Struct):
    code: int = 0
    message: str = ""


class _SafeSearchAnnotation(msgspec.Struct):
    adult: str | int | None = None
    violence: str | int | None = None
    racy: str | int | None = None
    medical: str | int | None = None
    spoof: str | int | None = None

    def to_scores(self) -> SafeSearchScores:
        return SafeSearchScores(
            adult=Likelihood.parse(self.adult),
            violence=Likelihood.parse(self.violence),
            racy=Likelihood.parse(self.racy),
            medical=Likelihood.parse(self.medical),
            spoof=Likelihood.parse(self.spoof),
        )


class _AnnotateImageResponse(msgspec.Struct, rename="camel"):
    safe_search_annotation: _SafeSearchAnnotation | None = None
    error: _Status | None = None


class _BatchAnnotateImagesResponse(msgspec.Struct):
    responses: list[_AnnotateImageResponse] = msgspec.field(default_factory=list)


def build_annotate_request(ref: ObjectReference) -> dict[str, object]:
    """Build the ``images:annotate`` body requesting safe-search for ``ref``.

    Examples
    --------
    >>> from safeframe.events.models import ObjectReference
    >>> body = build_annotate_request(ObjectReference("uploads", "cat.jpg"))
    >>> body["requests"][0]["image"]
    {'source': {'imageUri': 'gs://uploads/cat.jpg'}}

    """
    return {
        "requests": [
            {
                "image": {"source": {"imageUri": ref.uri}},
                "features": [{"type": SAFE_SEARCH_FEATURE}],
            }
        ]
    }


class VisionSafetyClassifier:
    """Classify stored images with the Vision API safe-search feature.

    Parameters
    ----------
    config
        Configuration for the Vision API client.
    http_client
        Optional httpx.AsyncClient for testing. If not provided,
        the instance creates and owns its own client.

    Examples
    --------
    >>> import asyncio
    >>> classifier = VisionSafetyClassifier(VisionClassifierConfig(api_key="k"))
    >>> # result = asyncio.run(classifier.classify(ref))
    >>> asyncio.run(classifier.aclose())

    """

    def __init__(
        self,
        config: VisionClassifierConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        if not config.api_key and not config.access_token:
            raise ClassifierConfigError.missing_credentials()

        self._config = config
        self._owns_client = http_client is None
        headers = {"Content-Type": "application/json"}
        if not config.api_key and config.access_token:
            headers["Authorization"] = f"Bearer {config.access_token}"
        self._headers = headers
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    @property
    def config(self) -> VisionClassifierConfig:
        """Read-only access to the client configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def classify(self, ref: ObjectReference) -> ClassificationResult:
        """Request safe-search annotation for ``ref``.

        Parameters
        ----------
        ref
            Object to classify, named to the service by its ``gs://`` URI.

        Returns
        -------
        ClassificationResult
            Scores for the object; ``scores`` is ``None`` when the response
            holds no annotation and ``error`` carries any per-item error.

        Raises
        ------
        VisionAPIError
            If the request fails, times out, or returns an error status.
        VisionResponseShapeError
            If the response body is not a valid annotate response.

        """
        response = await self._send_request(build_annotate_request(ref))
        self._check_response_errors(response)
        batch = self._parse_response(response)
        return self._build_result(ref, batch)

    async def _send_request(self, payload: dict[str, object]) -> httpx.Response:
        params = {"key": self._config.api_key} if self._config.api_key else None
        try:
            return await self._client.post(
                self._config.endpoint,
                json=payload,
                params=params,
                headers=self._headers,
            )
        except httpx.TimeoutException as exc:
            raise VisionAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise VisionAPIError.network_error(str(exc)) from exc

    def _check_response_errors(self, response: httpx.Response) -> None:
        if response.status_code == _HTTP_RATE_LIMITED:
            raise VisionAPIError.rate_limited(_get_retry_after(response))

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise VisionAPIError.http_error(response.status_code)

    def _parse_response(self, response: httpx.Response) -> _BatchAnnotateImagesResponse:
        try:
            return msgspec.json.decode(
                response.content, type=_BatchAnnotateImagesResponse
            )
        except msgspec.DecodeError as exc:
            raise VisionResponseShapeError.invalid_json(response.text) from exc

    def _build_result(
        self,
        ref: ObjectReference,
        batch: _BatchAnnotateImagesResponse,
    ) -> ClassificationResult:
        # One request was sent, so at most one response is meaningful.
        if not batch.responses:
            return ClassificationResult(uri=ref.uri)

        first = batch.responses[0]
        if first.error is not None and (first.error.code or first.error.message):
            detail = first.error.message or f"error code {first.error.code}"
            return ClassificationResult(uri=ref.uri, error=detail)

        if first.safe_search_annotation is None:
            return ClassificationResult(uri=ref.uri)
        return ClassificationResult(
            uri=ref.uri, scores=first.safe_search_annotation.to_scores()
        )
