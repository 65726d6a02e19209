"""Unit tests for the Vision API safe-search client."""

from __future__ import annotations

import asyncio
import typing as typ

import httpx
import msgspec
import pytest

from safeframe.events.models import ObjectReference
from safeframe.safety.config import VisionClassifierConfig
from safeframe.safety.errors import (
    ClassificationError,
    ClassifierConfigError,
    VisionAPIError,
    VisionResponseShapeError,
)
from safeframe.safety.models import Likelihood
from safeframe.safety.vision_client import (
    SAFE_SEARCH_FEATURE,
    VisionSafetyClassifier,
    build_annotate_request,
)

_REF = ObjectReference("uploads", "cats/tabby.jpg")
_ENDPOINT = "https://vision.test/v1/images:annotate"

Handler = typ.Callable[[httpx.Request], httpx.Response]


def _classify(
    handler: Handler,
    config: VisionClassifierConfig | None = None,
) -> typ.Any:  # noqa: ANN401 - result or raised error under test
    config = config or VisionClassifierConfig(api_key="k-123", endpoint=_ENDPOINT)

    async def run() -> typ.Any:  # noqa: ANN401
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            classifier = VisionSafetyClassifier(config, http_client=client)
            return await classifier.classify(_REF)

    return asyncio.run(run())


def _json(status: int, body: object) -> Handler:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body)

    return handler


def test_build_annotate_request_shape() -> None:
    """The request names the object by URI and asks for safe-search only."""
    assert build_annotate_request(_REF) == {
        "requests": [
            {
                "image": {"source": {"imageUri": "gs://uploads/cats/tabby.jpg"}},
                "features": [{"type": SAFE_SEARCH_FEATURE}],
            }
        ]
    }


class TestVisionRequest:
    """Tests for outgoing request construction."""

    def test_sends_key_param_and_body(self) -> None:
        """API key credentials travel as the key query parameter."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"responses": [{}]})

        _classify(handler)

        [request] = seen
        assert request.method == "POST"
        assert request.url.params["key"] == "k-123"
        assert "Authorization" not in request.headers
        assert msgspec.json.decode(request.content) == build_annotate_request(_REF)

    def test_bearer_token_when_no_api_key(self) -> None:
        """Access tokens travel as a bearer Authorization header."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"responses": []})

        _classify(
            handler, VisionClassifierConfig(access_token="tok", endpoint=_ENDPOINT)
        )

        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert "key" not in seen[0].url.params

    def test_requires_credentials(self) -> None:
        """A client without any credential cannot be built."""
        with pytest.raises(ClassifierConfigError):
            VisionSafetyClassifier(VisionClassifierConfig())


class TestVisionResults:
    """Tests for response interpretation."""

    def test_parses_annotation(self) -> None:
        """Named likelihoods decode into scores."""
        result = _classify(
            _json(
                200,
                {
                    "responses": [
                        {
                            "safeSearchAnnotation": {
                                "adult": "VERY_LIKELY",
                                "violence": "UNLIKELY",
                                "racy": "POSSIBLE",
                                "medical": "VERY_UNLIKELY",
                                "spoof": "UNKNOWN",
                            }
                        }
                    ]
                },
            )
        )
        assert result.uri == _REF.uri
        assert result.scores.adult is Likelihood.VERY_LIKELY
        assert result.scores.violence is Likelihood.UNLIKELY
        assert result.scores.racy is Likelihood.POSSIBLE
        assert result.error is None

    def test_numeric_likelihoods(self) -> None:
        """Numeric wire values decode to the same members."""
        result = _classify(
            _json(200, {"responses": [{"safeSearchAnnotation": {"violence": 5}}]})
        )
        assert result.scores.violence is Likelihood.VERY_LIKELY
        assert result.scores.adult is Likelihood.UNKNOWN

    @pytest.mark.parametrize("body", [{"responses": []}, {}, {"responses": [{}]}])
    def test_empty_responses_have_no_scores(self, body: object) -> None:
        """Missing annotations produce a result without scores."""
        result = _classify(_json(200, body))
        assert result.scores is None
        assert result.failed is False

    def test_per_item_error_is_carried_not_raised(self) -> None:
        """Per-item errors become the result's error detail."""
        result = _classify(
            _json(
                200,
                {"responses": [{"error": {"code": 3, "message": "Bad image data."}}]},
            )
        )
        assert result.failed is True
        assert result.error == "Bad image data."
        assert result.scores is None

    def test_per_item_error_without_message(self) -> None:
        """Errors without a message fall back to their code."""
        result = _classify(_json(200, {"responses": [{"error": {"code": 7}}]}))
        assert result.error == "error code 7"


class TestVisionFailures:
    """Tests for failures raised as ClassificationError."""

    def test_http_error(self) -> None:
        """Error statuses raise VisionAPIError with the status code."""
        with pytest.raises(VisionAPIError) as excinfo:
            _classify(_json(500, {"error": {"message": "internal"}}))
        assert excinfo.value.status_code == 500

    def test_rate_limited(self) -> None:
        """429 responses report Retry-After."""

        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"Retry-After": "12"})

        with pytest.raises(VisionAPIError, match="retry after 12s") as excinfo:
            _classify(handler)
        assert excinfo.value.status_code == 429

    def test_timeout(self) -> None:
        """Transport timeouts raise VisionAPIError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(VisionAPIError, match="timed out"):
            _classify(handler)

    def test_network_error(self) -> None:
        """Connection failures raise VisionAPIError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ClassificationError, match="network error"):
            _classify(handler)

    def test_invalid_json(self) -> None:
        """Undecodable bodies raise VisionResponseShapeError."""

        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>" + b"x" * 300)

        with pytest.raises(VisionResponseShapeError) as excinfo:
            _classify(handler)
        assert str(excinfo.value).endswith("..."), "preview should be truncated"
