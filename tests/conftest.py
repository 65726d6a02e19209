"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import datetime as dt
import typing as typ

import dramatiq
import pytest
from dramatiq.brokers.stub import StubBroker

from tests.helpers.log_capture import RecordingLogger
from tests.helpers.moderation_fakes import InMemoryObjectStore, RecordingTransform

if typ.TYPE_CHECKING:
    from pathlib import Path

# Actors bind to the global broker when safeframe.actors is imported.
dramatiq.set_broker(StubBroker())

NOW = dt.datetime(2024, 5, 1, 10, 0, 15, tzinfo=dt.UTC)


@pytest.fixture
def now() -> dt.datetime:
    """Fixed invocation time shared by staleness scenarios."""
    return NOW


@pytest.fixture
def event_log(monkeypatch: pytest.MonkeyPatch) -> RecordingLogger:
    """Capture structured moderation records synchronously."""
    recorder = RecordingLogger()
    monkeypatch.setattr("safeframe.observability.logger", recorder)
    return recorder


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Directory for transient artifacts, created lazily by the pipeline."""
    return tmp_path / "scratch"


@pytest.fixture
def source_store() -> InMemoryObjectStore:
    """Store seeded with one JPEG upload."""
    store = InMemoryObjectStore()
    store.add("uploads", "cats/tabby.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")
    return store


@pytest.fixture
def transform() -> RecordingTransform:
    """Transform that succeeds and records its calls."""
    return RecordingTransform()
