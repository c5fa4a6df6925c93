"""Replay a recorded edit stream through the capture service.

A recording is a JSONL file, one step per line::

    {"type": "open", "document": "add.go", "text": "func add(a, b) {\\n}"}
    {"type": "edit", "offset": 17, "text": "  return a + b;\\n", "delay_ms": 40}
    {"type": "edit", "offset": 3, "delete": 1, "text": "", "delay_ms": 900}
    {"type": "logging", "enabled": false}
    {"type": "marker"}

Edits are positional changes (``offset``/``delete``/``text``) applied to
an in-memory copy of the document, which yields the full-text snapshots
and the line metadata the capture session needs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from suggestion_meter.core.capture.models import (
    EditEvent,
    EditMessage,
    HostMessage,
    OpenDocumentMessage,
    SessionMarkerMessage,
    SetLoggingMessage,
)
from suggestion_meter.core.capture.service import CaptureService

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Recorded steps
# ---------------------------------------------------------------------------


class _Step(BaseModel):
    delay_ms: int = Field(default=0, ge=0, description="Pause before this step")


class OpenStep(_Step):
    type: Literal["open"] = "open"
    document: str
    text: str = ""


class EditStep(_Step):
    type: Literal["edit"] = "edit"
    document: str | None = Field(
        default=None, description="Defaults to the active document"
    )
    offset: int = Field(ge=0, description="Character offset of the change")
    delete: int = Field(default=0, ge=0, description="Characters removed at offset")
    text: str = Field(default="", description="Characters inserted at offset")


class LoggingStep(_Step):
    type: Literal["logging"] = "logging"
    enabled: bool | None = None


class ToggleStep(_Step):
    type: Literal["toggle"] = "toggle"


class MarkerStep(_Step):
    type: Literal["marker"] = "marker"


ReplayStep = Annotated[
    Union[OpenStep, EditStep, LoggingStep, ToggleStep, MarkerStep],
    Field(discriminator="type"),
]

_STEP_ADAPTER: TypeAdapter[ReplayStep] = TypeAdapter(ReplayStep)


def parse_steps(lines: Iterable[str]) -> Iterator[ReplayStep]:
    """Parse JSONL lines into steps, skipping blanks and ``#`` comments."""
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            yield _STEP_ADAPTER.validate_json(stripped)
        except ValueError as exc:
            raise ValueError(f"line {lineno}: invalid replay step: {exc}") from exc


def load_steps(path: Path) -> list[ReplayStep]:
    with open(path, encoding="utf-8") as f:
        return list(parse_steps(f))


# ---------------------------------------------------------------------------
# Document buffer
# ---------------------------------------------------------------------------


class DocumentBuffer:
    """In-memory document that turns positional changes into edit events."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    def apply(self, offset: int, delete: int, inserted: str) -> tuple[EditEvent, str]:
        """Apply one change.  Returns the edit event and the prior full text.

        Raises:
            ValueError: when the change falls outside the document.
        """
        if offset + delete > len(self.text):
            raise ValueError(
                f"change [{offset}, {offset + delete}) outside document "
                f"of {len(self.text)} chars"
            )
        prior = self.text
        start_line = prior.count("\n", 0, offset)
        end_line = prior.count("\n", 0, offset + delete)
        self.text = prior[:offset] + inserted + prior[offset + delete:]
        return EditEvent.from_change(inserted, start_line, end_line), prior


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class ReplayRunner:
    """Feeds replay steps to a running ``CaptureService`` in real time."""

    def __init__(self, service: CaptureService, *, speed: float = 1.0) -> None:
        if speed <= 0:
            raise ValueError("speed must be positive")
        self.service = service
        self.speed = speed
        self.buffers: dict[str, DocumentBuffer] = {}
        self.active_document: str | None = None

    async def run(self, steps: Iterable[ReplayStep]) -> int:
        """Replay ``steps``; returns the number of messages submitted."""
        submitted = 0
        for step in steps:
            if step.delay_ms:
                await asyncio.sleep(step.delay_ms / 1000 / self.speed)
            message = self._to_message(step)
            if message is None:
                continue
            self.service.submit(message)
            await self.service.join()
            submitted += 1
        return submitted

    def _to_message(self, step: ReplayStep) -> HostMessage | None:
        if isinstance(step, OpenStep):
            self.buffers[step.document] = DocumentBuffer(step.text)
            self.active_document = step.document
            return OpenDocumentMessage(document=step.document, text=step.text)
        if isinstance(step, EditStep):
            document = step.document or self.active_document
            if document is None:
                logger.warning("Skipping edit before any document was opened")
                return None
            buffer = self.buffers.setdefault(document, DocumentBuffer())
            event, prior = buffer.apply(step.offset, step.delete, step.text)
            return EditMessage(
                document=document,
                changes=[event],
                text=buffer.text,
                prior_text=prior,
            )
        if isinstance(step, LoggingStep):
            return SetLoggingMessage(enabled=step.enabled)
        if isinstance(step, ToggleStep):
            return SetLoggingMessage(enabled=None)
        return SessionMarkerMessage()
