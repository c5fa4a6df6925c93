"""Collaborators that receive flush results: abstract interfaces and errors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from suggestion_meter.core.capture.models import DisplayUpdate, EpisodeRecord

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SinkError(Exception):
    """Raised when a record cannot be written to the suggestion log."""


# ---------------------------------------------------------------------------
# Abstract collaborators
# ---------------------------------------------------------------------------


class LogSink(ABC):
    """Durable, append-only store of captured suggestions."""

    @abstractmethod
    def append(self, record: EpisodeRecord) -> None:
        """Append one episode record.

        Raises:
            SinkError: when the record could not be written.
        """

    @abstractmethod
    def write_marker(self, text: str) -> None:
        """Append a free-form marker line (session start, test entries)."""


class DisplaySurface(ABC):
    """Live, push-based presentation of the running totals."""

    @abstractmethod
    def update(self, update: DisplayUpdate) -> None:
        """Show the totals after a recorded flush."""

    @abstractmethod
    def set_logging(self, enabled: bool) -> None:
        """Reflect the logging toggle."""

    @abstractmethod
    def notify_error(self, message: str) -> None:
        """Surface a user-actionable failure."""


class NullDisplay(DisplaySurface):
    """Display that shows nothing (headless sessions)."""

    def update(self, update: DisplayUpdate) -> None:
        pass

    def set_logging(self, enabled: bool) -> None:
        pass

    def notify_error(self, message: str) -> None:
        pass
