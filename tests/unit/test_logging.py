"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from safeframe.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)
from tests.helpers.log_capture import RecordingLogger


class TestNormalizeLogLevel:
    """Tests for normalize_log_level."""

    @pytest.mark.parametrize(
        ("input_level", "expected_level", "expected_invalid"),
        [
            ("warning", "WARNING", False),
            ("  debug ", "DEBUG", False),
            ("TRACE", "TRACE", False),
            (None, "INFO", True),
            ("", "INFO", True),
            ("loud", "INFO", True),
        ],
    )
    def test_normalize_log_level(
        self,
        input_level: str | None,
        expected_level: str,
        *,
        expected_invalid: bool,
    ) -> None:
        """Normalize log levels and flag unusable inputs."""
        level, invalid = normalize_log_level(input_level)
        assert level == expected_level, (
            f"Expected {input_level!r} to normalize to {expected_level}."
        )
        assert invalid is expected_invalid, (
            f"Expected invalid flag to be {expected_invalid} for {input_level!r}."
        )


def test_configure_logging_passes_normalized_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """configure_logging hands the normalized level to femtologging."""
    calls: list[tuple[str, bool]] = []

    def fake_basic_config(*, level: str, force: bool) -> None:
        calls.append((level, force))

    monkeypatch.setattr("safeframe.logging.basicConfig", fake_basic_config)

    result = configure_logging("bogus", force=True)

    assert result == ("INFO", True), "Expected fallback to INFO flagged invalid."
    assert calls == [("INFO", True)], "Expected basicConfig called once with INFO."


def test_format_log_message_uses_percent_formatting() -> None:
    """Percent formatting produces the expected message."""
    message = format_log_message("object %s age_ms=%d", "gs://b/k", 12)
    assert message == "object gs://b/k age_ms=12", "Expected percent formatting."


def test_log_info_formats_and_passes_level() -> None:
    """log_info formats messages and emits INFO level."""
    logger = RecordingLogger()

    log_info(logger, "hello %s", "world")

    assert [(r.level, r.message, r.exc_info) for r in logger.records] == [
        ("INFO", "hello world", None)
    ], "Expected INFO log entry with formatted message."


def test_log_debug_emits_debug_level() -> None:
    """log_debug emits DEBUG level."""
    logger = RecordingLogger()

    log_debug(logger, "trace %d", 1)

    assert logger.records[0].level == "DEBUG", "Expected DEBUG level."


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = RecordingLogger()
    exc = ValueError("boom")

    log_warning(logger, "warning: %s", "oops", exc_info=exc)

    record = logger.records[0]
    assert (record.level, record.message) == ("WARNING", "warning: oops")
    assert record.exc_info is exc, "Expected exc_info forwarded."


def test_log_error_without_exc_info() -> None:
    """log_error defaults exc_info to None."""
    logger = RecordingLogger()

    log_error(logger, "error: %s", "oops")

    record = logger.records[0]
    assert (record.level, record.message, record.exc_info) == (
        "ERROR",
        "error: oops",
        None,
    ), "Expected ERROR log entry without exc_info."


def test_log_exception_passes_exc_info() -> None:
    """log_exception forwards the exception payload to the logger."""
    logger = RecordingLogger()
    exc = ValueError("boom")

    log_exception(logger, "failed 100%", exc)

    record = logger.records[0]
    assert record.message == "failed 100%", "Message must not be interpolated."
    assert record.exc_info is exc, "Expected exc_info forwarded."
