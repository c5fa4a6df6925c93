"""Shared fakes and fixtures for the capture pipeline tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from suggestion_meter.configs.config import AppConfig
from suggestion_meter.configs.system import CaptureConfig, EstimatorConfig, SinkConfig
from suggestion_meter.core.capture.models import DisplayUpdate, EpisodeRecord
from suggestion_meter.core.capture.session import CaptureSession
from suggestion_meter.core.capture.tokenizer import TokenizerError
from suggestion_meter.core.sink.base import DisplaySurface, LogSink, SinkError
from suggestion_meter.infra.timers import TimerService

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

# =========================================================================
# Fakes
# =========================================================================


class FakeTimerService(TimerService):
    """Manual clock: timers fire only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0
        self.started = 0
        self.fired: list[int] = []
        self._timers: dict[int, tuple[int, Callable[[], None]]] = {}
        self._next_handle = 0

    def start(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._timers[handle] = (self.now + delay_ms, callback)
        self.started += 1
        return handle

    def cancel(self, handle: int) -> None:
        self._timers.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [(at, h) for h, (at, _) in self._timers.items() if at <= target]
            if not due:
                break
            at, handle = min(due)
            _, callback = self._timers.pop(handle)
            self.now = at
            self.fired.append(at)
            callback()
        self.now = target


class StubTokenizer:
    """Counts whitespace-separated words, or returns a fixed count."""

    def __init__(self, tokens: int | None = None, fail: bool = False) -> None:
        self.tokens = tokens
        self.fail = fail
        self.calls: list[str] = []

    def count(self, text: str) -> int:
        self.calls.append(text)
        if self.fail:
            raise TokenizerError("stub tokenizer failure")
        if self.tokens is not None:
            return self.tokens
        return len(text.split())


class MemorySink(LogSink):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.records: list[EpisodeRecord] = []
        self.markers: list[str] = []

    def append(self, record: EpisodeRecord) -> None:
        if self.fail:
            raise SinkError("disk full")
        self.records.append(record)

    def write_marker(self, text: str) -> None:
        if self.fail:
            raise SinkError("disk full")
        self.markers.append(text)


class RecordingDisplay(DisplaySurface):
    def __init__(self) -> None:
        self.updates: list[DisplayUpdate] = []
        self.logging_states: list[bool] = []
        self.errors: list[str] = []

    def update(self, update: DisplayUpdate) -> None:
        self.updates.append(update)

    def set_logging(self, enabled: bool) -> None:
        self.logging_states.append(enabled)

    def notify_error(self, message: str) -> None:
        self.errors.append(message)


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture
def timers() -> FakeTimerService:
    return FakeTimerService()


@pytest.fixture
def tokenizer() -> StubTokenizer:
    return StubTokenizer()


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def make_config(tmp_path):
    def _make(**capture: object) -> AppConfig:
        capture.setdefault("debounce_ms", 2000)
        return AppConfig(
            capture=CaptureConfig(**capture),
            estimator=EstimatorConfig(),
            sink=SinkConfig(log_path=tmp_path / "suggestion_log.txt"),
        )

    return _make


@pytest.fixture
def make_session(make_config, timers, tokenizer, sink, display):
    def _make(**capture: object) -> CaptureSession:
        session = CaptureSession(
            make_config(**capture),
            timers=timers,
            tokenizer=tokenizer,  # type: ignore[arg-type]
            sink=sink,
            display=display,
            clock=lambda: FIXED_NOW,
        )
        return session

    return _make
