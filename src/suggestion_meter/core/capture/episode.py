"""Debounced episode state machine.

States::

    IDLE ──significant edit──▶ CAPTURING ──timer fires──▶ IDLE
                                  │  ▲
                                  └──┘ significant edit (restart timer)

The machine buffers two whole-document snapshots: the text just before
the first significant edit (``base_text``) and the text after the most
recent one (``final_text``).  When no significant edit arrives for
``debounce_ms`` the pair is detached and handed to the flush handler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from suggestion_meter.configs.system import CaptureConfig
from suggestion_meter.infra.metrics import EDIT_EVENTS_TOTAL
from suggestion_meter.infra.timers import TimerService

from .classifier import any_significant
from .models import CaptureState, EditEvent, Episode

logger = logging.getLogger(__name__)

FlushHandler = Callable[[str, str, int], None]
"""Receives ``(base_text, final_text, edit_count)`` of a closed episode."""


class EpisodeStateMachine:
    """Owns the open episode and its debounce timer for one document."""

    def __init__(
        self,
        config: CaptureConfig,
        timers: TimerService,
        on_flush: FlushHandler,
        previous_text: str = "",
    ) -> None:
        self.config = config
        self._timers = timers
        self._on_flush = on_flush
        self._previous_text = previous_text
        self._episode = Episode()

    @property
    def state(self) -> CaptureState:
        if self._episode.is_open:
            return CaptureState.CAPTURING
        return CaptureState.IDLE

    @property
    def episode(self) -> Episode:
        return self._episode

    @property
    def previous_text(self) -> str:
        return self._previous_text

    def on_edit(
        self,
        event: EditEvent | Sequence[EditEvent],
        current_text: str,
        prior_text: str | None = None,
    ) -> bool:
        """Feed one edit notification.  Returns whether it was significant."""
        events = [event] if isinstance(event, EditEvent) else list(event)
        if prior_text is None:
            prior_text = self._previous_text

        significant = any_significant(events, self.config)
        EDIT_EVENTS_TOTAL.labels(significant=str(significant).lower()).inc()

        if significant:
            episode = self._episode
            if episode.base_text is None:
                episode.base_text = prior_text
                logger.debug("Episode opened (base=%d chars)", len(prior_text))
            episode.final_text = current_text
            episode.edit_count += 1
            self._restart_timer()

        # Raw document evolution is tracked regardless of significance.
        self._previous_text = current_text
        return significant

    def flush(self) -> None:
        """Close the open episode and hand its snapshots to the flush handler.

        No-op when no episode is open.  The episode is cleared before the
        handler runs, and handler errors are logged, never raised.
        """
        episode = self._episode
        base, final, edits = episode.base_text, episode.final_text, episode.edit_count
        self._clear()
        if base is None or final is None:
            return
        logger.debug("Flushing episode after %d significant edit(s)", edits)
        try:
            self._on_flush(base, final, edits)
        except Exception:
            logger.exception("Episode flush handler failed")

    def track(self, text: str) -> None:
        """Record ``text`` as the latest document text without classifying it."""
        self._previous_text = text

    def reset(self, text: str) -> bool:
        """Track a new document, abandoning any open episode.

        Returns ``True`` when an open episode was dropped.
        """
        abandoned = self._episode.base_text is not None
        if abandoned:
            logger.info(
                "Abandoning open episode (%d edit(s))",
                self._episode.edit_count,
            )
        self._clear()
        self._previous_text = text
        return abandoned

    # -- internal ----------------------------------------------------

    def _restart_timer(self) -> None:
        if self._episode.timer is not None:
            self._timers.cancel(self._episode.timer)
        self._episode.timer = self._timers.start(
            self.config.debounce_ms, self.flush
        )

    def _clear(self) -> None:
        if self._episode.timer is not None:
            self._timers.cancel(self._episode.timer)
        self._episode.clear()
