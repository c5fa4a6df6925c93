"""Domain models for suggestion capture.

Edit events and host messages are pydantic models so that recorded edit
streams (JSONL) validate on the way in.  The episode itself is a plain
mutable dataclass owned by the state machine.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Edit events
# ---------------------------------------------------------------------------


class EditEvent(BaseModel):
    """One observed content change, consumed once by the state machine."""

    inserted_text: str = Field(description="Text inserted by the change")
    span_is_multi_line: bool = Field(
        default=False, description="Inserted text spans more than one line"
    )
    range_crosses_lines: bool = Field(
        default=False, description="Replaced range starts and ends on different lines"
    )

    @classmethod
    def from_change(
        cls, inserted_text: str, start_line: int, end_line: int
    ) -> EditEvent:
        """Build an event from raw change data, deriving the line flags."""
        return cls(
            inserted_text=inserted_text,
            span_is_multi_line=len(inserted_text.split("\n")) > 1,
            range_crosses_lines=start_line != end_line,
        )


# ---------------------------------------------------------------------------
# Episode
# ---------------------------------------------------------------------------


class CaptureState(enum.Enum):
    IDLE = "idle"
    CAPTURING = "capturing"


@dataclass(slots=True)
class Episode:
    """Snapshots buffered between the first significant edit and the flush."""

    base_text: str | None = None
    final_text: str | None = None
    timer: Any = None
    edit_count: int = 0

    @property
    def is_open(self) -> bool:
        return self.base_text is not None and self.timer is not None

    def clear(self) -> None:
        self.base_text = None
        self.final_text = None
        self.timer = None
        self.edit_count = 0


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class UsageTotals:
    """Running totals for one capture session.

    Only ``UsageEstimator`` mutates these; values are never reset while the
    session lives.
    """

    total_energy_joules: float = 0.0
    total_emissions_grams: float = 0.0
    episodes: int = 0


class UsageEstimate(BaseModel):
    """Published (rounded) result of one accepted flush."""

    token_count: int
    energy_joules: float
    total_energy_joules: float
    total_emissions_grams: float


class EpisodeRecord(BaseModel):
    """Structured record appended to the suggestion log."""

    timestamp: datetime
    file_name: str
    inserted_text: str
    token_count: int
    energy_joules: float
    total_energy_joules: float
    total_emissions_grams: float


class DisplayUpdate(BaseModel):
    """Values pushed to the display surface after a recorded flush."""

    total_energy_joules: float
    last_episode_energy_joules: float
    total_emissions_grams: float


# ---------------------------------------------------------------------------
# Host messages (inbox of the capture service)
# ---------------------------------------------------------------------------


class OpenDocumentMessage(BaseModel):
    """The host made ``document`` the active document."""

    type: Literal["open"] = "open"
    document: str = Field(description="Document path or name")
    text: str = Field(default="", description="Full text of the document")


class EditMessage(BaseModel):
    """The host observed one or more changes to ``document``."""

    type: Literal["edit"] = "edit"
    document: str = Field(description="Document path or name")
    changes: list[EditEvent] = Field(description="Content changes of this notification")
    text: str = Field(description="Full document text after the changes")
    prior_text: str | None = Field(
        default=None,
        description="Full text before the changes; tracked internally when absent",
    )


class SetLoggingMessage(BaseModel):
    """Enable, disable or (``enabled=None``) toggle capture."""

    type: Literal["set_logging"] = "set_logging"
    enabled: bool | None = Field(default=None, description="New state, or toggle")


class SessionMarkerMessage(BaseModel):
    """Append a session-start marker to the suggestion log."""

    type: Literal["marker"] = "marker"


HostMessage = (
    OpenDocumentMessage | EditMessage | SetLoggingMessage | SessionMarkerMessage
)
