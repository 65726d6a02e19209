"""Configuration for the Vision API safe-search client."""

from __future__ import annotations

import dataclasses
import os

from safeframe.safety.errors import ClassifierConfigError

_DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"
_DEFAULT_TIMEOUT_S = 30.0


@dataclasses.dataclass(frozen=True, slots=True)
class VisionClassifierConfig:
    """Configuration for the Vision API client.

    Attributes
    ----------
    api_key
        API key sent as the ``key`` query parameter.
    access_token
        OAuth bearer token, used when no API key is configured.
    endpoint
        ``images:annotate`` endpoint URL.
    timeout_s
        Request timeout in seconds.

    """

    api_key: str | None = None
    access_token: str | None = None
    endpoint: str = _DEFAULT_ENDPOINT
    timeout_s: float = _DEFAULT_TIMEOUT_S

    @staticmethod
    def _parse_timeout_from_env() -> float:
        raw_timeout = os.environ.get("SAFEFRAME_VISION_TIMEOUT_S")
        if raw_timeout is None:
            return _DEFAULT_TIMEOUT_S

        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ClassifierConfigError.invalid_timeout(raw_timeout) from exc

        if timeout <= 0:
            raise ClassifierConfigError.invalid_timeout(raw_timeout)
        return timeout

    @classmethod
    def from_env(cls) -> VisionClassifierConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``SAFEFRAME_VISION_API_KEY``: API key (one credential is required)
        - ``SAFEFRAME_GCP_ACCESS_TOKEN``: OAuth access token
        - ``SAFEFRAME_VISION_ENDPOINT``: Optional endpoint override
        - ``SAFEFRAME_VISION_TIMEOUT_S``: Optional timeout in seconds

        Raises
        ------
        ClassifierConfigError
            If no credential is configured or the timeout is invalid.

        """
        api_key = (os.environ.get("SAFEFRAME_VISION_API_KEY") or "").strip() or None
        access_token = (
            os.environ.get("SAFEFRAME_GCP_ACCESS_TOKEN") or ""
        ).strip() or None
        if api_key is None and access_token is None:
            raise ClassifierConfigError.missing_credentials()

        return cls(
            api_key=api_key,
            access_token=access_token,
            endpoint=os.environ.get("SAFEFRAME_VISION_ENDPOINT", _DEFAULT_ENDPOINT),
            timeout_s=cls._parse_timeout_from_env(),
        )
