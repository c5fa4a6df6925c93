"""Tests for the plain-text suggestion log and the status line display."""

import io
from datetime import datetime, timezone

import pytest

from suggestion_meter.core.capture.models import DisplayUpdate, EpisodeRecord
from suggestion_meter.core.sink import (
    FileLogSink,
    SinkError,
    StatusLineDisplay,
    format_record,
    render_status,
)


def _record(**overrides) -> EpisodeRecord:
    data = dict(
        timestamp=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
        file_name="add.go",
        inserted_text="  return a + b;\n",
        token_count=6,
        energy_joules=12.96,
        total_energy_joules=12.96,
        total_emissions_grams=0.0,
    )
    data.update(overrides)
    return EpisodeRecord(**data)


class TestFormatRecord:
    def test_block_layout(self):
        text = format_record(_record())
        lines = text.split("\n")
        assert lines[0] == ""
        assert lines[1] == "--- Suggestion accepted (2025-03-01T12:00:00+00:00) ---"
        assert lines[2] == "File: add.go"
        assert lines[3] == "Tokens: 6 | Energy: 12.96 J | Total: 12.96 J | CO2: 0.0 g"
        assert lines[4] == "Suggestion:"
        assert lines[5] == "  return a + b;"
        assert text.endswith("-" * 40 + "\n")


class TestFileLogSink:
    def test_creates_directory_and_appends(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "log.txt"
        sink = FileLogSink(path)
        sink.append(_record())
        sink.append(_record(file_name="b.py"))

        content = path.read_text(encoding="utf-8")
        assert content.count("--- Suggestion accepted") == 2
        assert content.index("File: add.go") < content.index("File: b.py")

    def test_marker_and_test_entry(self, tmp_path):
        path = tmp_path / "log.txt"
        sink = FileLogSink(path)
        sink.write_marker("Inline chat started (now)")
        sink.write_test_entry()
        content = path.read_text(encoding="utf-8")
        assert "--- Inline chat started (now) ---" in content
        assert "Test log entry at " in content

    def test_write_failure_raises_sink_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        sink = FileLogSink(blocker / "log.txt")
        with pytest.raises(SinkError, match="Failed to write to log file"):
            sink.append(_record())


class TestStatusLineDisplay:
    def test_renders_totals(self):
        out = io.StringIO()
        display = StatusLineDisplay(out)
        update = DisplayUpdate(
            total_energy_joules=25.92,
            last_episode_energy_joules=12.96,
            total_emissions_grams=0.0,
        )
        display.update(update)
        assert out.getvalue() == render_status(update) + "\n"
        assert "Energy used: 25.92 J (last 12.96 J)" in out.getvalue()
        assert display.last_update == update

    def test_logging_state_and_errors(self):
        out = io.StringIO()
        display = StatusLineDisplay(out)
        display.set_logging(False)
        display.notify_error("disk full")
        assert display.logging_enabled is False
        assert "Suggestion log off" in out.getvalue()
        assert "disk full" in out.getvalue()
