"""Plain-text, append-only suggestion log."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from suggestion_meter.core.capture.models import EpisodeRecord

from .base import LogSink, SinkError

logger = logging.getLogger(__name__)

_SEPARATOR = "-" * 40
_ENCODING = "utf-8"


def format_record(record: EpisodeRecord) -> str:
    """Render ``record`` as the human-readable block stored in the log."""
    return (
        f"\n--- Suggestion accepted ({record.timestamp.isoformat()}) ---\n"
        f"File: {record.file_name}\n"
        f"Tokens: {record.token_count} | "
        f"Energy: {record.energy_joules} J | "
        f"Total: {record.total_energy_joules} J | "
        f"CO2: {record.total_emissions_grams} g\n"
        f"Suggestion:\n{record.inserted_text}\n"
        f"{_SEPARATOR}\n"
    )


class FileLogSink(LogSink):
    """Appends records to a UTF-8 text file, creating its directory on demand."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def append(self, record: EpisodeRecord) -> None:
        self._write(format_record(record))

    def write_marker(self, text: str) -> None:
        self._write(f"\n--- {text} ---\n{_SEPARATOR}\n")

    def write_test_entry(self) -> None:
        """Append a timestamped test line (checks the log is writable)."""
        now = datetime.now(timezone.utc).isoformat()
        self._write(f"Test log entry at {now}\n")

    def _write(self, text: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding=_ENCODING) as f:
                f.write(text)
        except OSError as exc:
            raise SinkError(f"Failed to write to log file {self.path}: {exc}") from exc
        logger.debug("Appended %d chars to %s", len(text), self.path)
