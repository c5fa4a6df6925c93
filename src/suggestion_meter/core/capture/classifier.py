"""Heuristic that tells suggestion-like insertions from ordinary typing."""

from collections.abc import Iterable

from suggestion_meter.configs.system import CaptureConfig

from .models import EditEvent


def is_significant(event: EditEvent, config: CaptureConfig) -> bool:
    """Return ``True`` when ``event`` resembles a multi-character or multi-line insertion."""
    if event.span_is_multi_line or event.range_crosses_lines:
        return True
    length = len(event.inserted_text.strip())
    if length == 0:
        return False
    if config.min_insert_length_inclusive:
        return length >= config.min_insert_length
    return length > config.min_insert_length


def any_significant(events: Iterable[EditEvent], config: CaptureConfig) -> bool:
    return any(is_significant(event, config) for event in events)
