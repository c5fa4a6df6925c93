"""Console status line showing the running energy totals."""

import sys
from typing import TextIO

from suggestion_meter.core.capture.models import DisplayUpdate

from .base import DisplaySurface


class StatusLineDisplay(DisplaySurface):
    """Writes one status line per update to a text stream."""

    def __init__(self, output: TextIO = sys.stdout) -> None:
        """Initialize the display.

        Parameters
        ----------
        output
            File-like object to write status lines to (default: stdout).
        """
        self.output = output
        self.logging_enabled = True
        self.last_update: DisplayUpdate | None = None

    def update(self, update: DisplayUpdate) -> None:
        self.last_update = update
        self._print(render_status(update))

    def set_logging(self, enabled: bool) -> None:
        self.logging_enabled = enabled
        label = "⏺ Logging suggestions" if enabled else "⊘ Suggestion log off"
        self._print(label)

    def notify_error(self, message: str) -> None:
        self._print(f"❌ {message}")

    def _print(self, text: str) -> None:
        self.output.write(text + "\n")
        self.output.flush()


def render_status(update: DisplayUpdate) -> str:
    return (
        f"Energy used: {update.total_energy_joules} J "
        f"(last {update.last_episode_energy_joules} J) | "
        f"CO2: {update.total_emissions_grams} g"
    )
