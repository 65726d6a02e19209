"""Unit tests for safeframe.api.errors exceptions and error handlers.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_errors.py

"""

from __future__ import annotations

import falcon.asgi
import falcon.testing
import pytest

from safeframe.api.errors import (
    InvalidEnvelopeError,
    handle_classification_error,
    handle_invalid_envelope,
    handle_remediation_error,
)
from safeframe.remediation.errors import RemediationError
from safeframe.remediation.pipeline import RemediationOutcome, RemediationStage
from safeframe.safety.errors import ClassificationError, VisionAPIError
from safeframe.storage.errors import StorageAPIError


class _BadEnvelopeResource:
    """Resource that raises InvalidEnvelopeError."""

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        msg = "push body has no message.data"
        raise InvalidEnvelopeError(msg)


class _ClassifierDownResource:
    """Resource that raises a classification transport error."""

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        raise VisionAPIError.http_error(503)


class _UploadFailedResource:
    """Resource that raises RemediationError for a failed upload."""

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        outcome = RemediationOutcome.failed(
            RemediationStage.UPLOAD, StorageAPIError.http_error(503, "upload")
        )
        raise RemediationError(outcome)


@pytest.fixture
def client() -> falcon.testing.TestClient:
    """Build a test client with error handlers registered."""
    app = falcon.asgi.App()
    app.add_route("/bad-envelope", _BadEnvelopeResource())
    app.add_route("/classifier-down", _ClassifierDownResource())
    app.add_route("/upload-failed", _UploadFailedResource())
    app.add_error_handler(InvalidEnvelopeError, handle_invalid_envelope)
    app.add_error_handler(ClassificationError, handle_classification_error)
    app.add_error_handler(RemediationError, handle_remediation_error)
    return falcon.testing.TestClient(app)


class TestInvalidEnvelopeError:
    """Tests for InvalidEnvelopeError and its handler."""

    def test_returns_400(self, client: falcon.testing.TestClient) -> None:
        """Handler maps InvalidEnvelopeError to HTTP 400."""
        result = client.simulate_post("/bad-envelope")
        assert result.status == falcon.HTTP_400, "expected HTTP 400"

    def test_response_body_carries_reason(
        self, client: falcon.testing.TestClient
    ) -> None:
        """Response body includes the decoding failure reason."""
        result = client.simulate_post("/bad-envelope")
        assert result.json == {
            "title": "Invalid push envelope",
            "description": "push body has no message.data",
        }

    def test_reason_attribute(self) -> None:
        """Exception exposes the reason it was raised with."""
        err = InvalidEnvelopeError("bad base64")
        assert err.reason == "bad base64"
        assert str(err) == "bad base64"


class TestClassificationErrorHandler:
    """Tests for the classification failure handler."""

    def test_returns_500(self, client: falcon.testing.TestClient) -> None:
        """Transport failures surface as HTTP 500 so delivery is retried."""
        result = client.simulate_post("/classifier-down")
        assert result.status == falcon.HTTP_500, "expected HTTP 500"
        assert result.json["title"] == "Classification failed"
        assert "503" in result.json["description"], "missing status code"


class TestRemediationErrorHandler:
    """Tests for the remediation failure handler."""

    def test_returns_500_with_stage(self, client: falcon.testing.TestClient) -> None:
        """Fatal remediation failures name the failing stage."""
        result = client.simulate_post("/upload-failed")
        assert result.status == falcon.HTTP_500, "expected HTTP 500"
        assert result.json["title"] == "Remediation failed"
        assert result.json["stage"] == "upload"
        assert "upload" in result.json["description"]
