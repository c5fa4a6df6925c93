"""Capture session: the context object owning all per-session state.

One ``CaptureSession`` holds the logging toggle, the active document, the
episode state machine, the running ``UsageTotals`` and the collaborators
a flush reports to.  Nothing here is module-global: starting a new
session starts from zero.

Flush pipeline (runs when the debounce timer fires)::

    (base, final) ─▶ extract_inserted ─▶ TokenCounter.count
                  ─▶ UsageEstimator.estimate ─▶ LogSink.append
                  ─▶ DisplaySurface.update

Every failure is contained within the flush: degenerate episodes and
tokenizer errors are dropped silently, sink failures are logged and shown
on the display while the totals stay in memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import PurePath

from opentelemetry.trace import Span

from suggestion_meter.configs.config import AppConfig
from suggestion_meter.core.sink.base import DisplaySurface, LogSink, NullDisplay, SinkError
from suggestion_meter.core.sink.file import FileLogSink
from suggestion_meter.infra.metrics import (
    ENERGY_JOULES,
    EPISODES_ABANDONED_TOTAL,
    EPISODES_TOTAL,
    SINK_FAILURES_TOTAL,
    TOKENS_TOTAL,
)
from suggestion_meter.infra.telemetry import (
    ATTR_EPISODE_DELTA_LEN,
    ATTR_EPISODE_DOCUMENT,
    ATTR_EPISODE_EDITS,
    ATTR_EPISODE_OUTCOME,
    ATTR_EPISODE_TOKENS,
    ATTR_SINK_ERROR,
    SPAN_EPISODE_FLUSH,
    SPAN_SINK_APPEND,
    tracer,
)
from suggestion_meter.infra.timers import AsyncioTimerService, TimerService

from .delta import extract_inserted
from .episode import EpisodeStateMachine
from .estimator import UsageEstimator
from .models import CaptureState, DisplayUpdate, EditEvent, EpisodeRecord, UsageTotals
from .tokenizer import TokenCounter, TokenizerError

logger = logging.getLogger(__name__)

OUTCOME_RECORDED = "recorded"
OUTCOME_EMPTY = "empty"
OUTCOME_BELOW_THRESHOLD = "below_threshold"
OUTCOME_TOKENIZER_ERROR = "tokenizer_error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CaptureSession:
    """Session context for capturing suggestions in one editing session."""

    def __init__(
        self,
        config: AppConfig,
        *,
        timers: TimerService,
        tokenizer: TokenCounter,
        sink: LogSink,
        display: DisplaySurface | None = None,
        totals: UsageTotals | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.tokenizer = tokenizer
        self.sink = sink
        self.display = display or NullDisplay()
        self.totals = totals if totals is not None else UsageTotals()
        self.estimator = UsageEstimator(config.estimator, self.totals)
        self.machine = EpisodeStateMachine(
            config.capture, timers, self._process_episode
        )
        self.enabled = config.sink.enabled_on_start
        self.active_document: str | None = None
        self.last_record: EpisodeRecord | None = None
        self._clock = clock

    @property
    def state(self) -> CaptureState:
        return self.machine.state

    # -- host operations ---------------------------------------------

    def open_document(self, document: str, text: str) -> None:
        """Make ``document`` the active document, starting from ``text``."""
        if (
            self.config.capture.on_document_switch == "flush"
            and self.machine.state is CaptureState.CAPTURING
        ):
            self.machine.flush()
        if self.machine.reset(text):
            EPISODES_ABANDONED_TOTAL.inc()
        self.active_document = document
        logger.debug("Active document: %s (%d chars)", document, len(text))

    def handle_edit(
        self,
        document: str,
        changes: EditEvent | Sequence[EditEvent],
        text: str,
        prior_text: str | None = None,
    ) -> bool:
        """Feed an edit notification.  Returns whether it was significant.

        Ignored when ``document`` is not the active document.  While logging
        is disabled the text is only tracked, so typing done in that period
        never becomes part of a later episode.
        """
        if document != self.active_document:
            logger.debug("Ignoring edit to inactive document %s", document)
            return False
        if not self.enabled:
            self.machine.track(text)
            return False
        return self.machine.on_edit(changes, text, prior_text)

    def set_enabled(self, enabled: bool | None = None) -> bool:
        """Enable or disable capture; ``None`` toggles.  Returns the new state.

        Disabling abandons an open episode.
        """
        self.enabled = (not self.enabled) if enabled is None else enabled
        if not self.enabled and self.machine.reset(self.machine.previous_text):
            EPISODES_ABANDONED_TOTAL.inc()
        logger.info("Suggestion logging %s", "enabled" if self.enabled else "disabled")
        self.display.set_logging(self.enabled)
        return self.enabled

    def flush_now(self) -> None:
        """Flush the open episode without waiting for the debounce timer."""
        self.machine.flush()

    def write_marker(self) -> None:
        """Append a session-start marker to the log (when logging is enabled)."""
        if not self.enabled:
            return
        try:
            self.sink.write_marker(
                f"Inline chat started ({self._clock().isoformat()})"
            )
        except SinkError as exc:
            self._report_sink_failure(exc)

    # -- flush pipeline ----------------------------------------------

    def _process_episode(self, base: str, final: str, edit_count: int) -> None:
        document = self.active_document or ""
        with tracer.start_as_current_span(SPAN_EPISODE_FLUSH) as span:
            span.set_attribute(ATTR_EPISODE_DOCUMENT, document)
            span.set_attribute(ATTR_EPISODE_EDITS, edit_count)
            outcome = self._run_pipeline(base, final, document, span)
            span.set_attribute(ATTR_EPISODE_OUTCOME, outcome)
        EPISODES_TOTAL.labels(outcome=outcome).inc()

    def _run_pipeline(
        self, base: str, final: str, document: str, span: Span
    ) -> str:
        inserted = extract_inserted(
            base, final, self.config.capture.extraction_strategy
        )
        span.set_attribute(ATTR_EPISODE_DELTA_LEN, len(inserted))
        if not inserted.strip():
            logger.debug("Discarding episode with no inserted text")
            return OUTCOME_EMPTY

        try:
            token_count = self.tokenizer.count(inserted)
        except TokenizerError as exc:
            logger.debug("Discarding episode: %s", exc)
            return OUTCOME_TOKENIZER_ERROR
        span.set_attribute(ATTR_EPISODE_TOKENS, token_count)

        estimate = self.estimator.estimate(token_count)
        if estimate is None:
            return OUTCOME_BELOW_THRESHOLD

        TOKENS_TOTAL.inc(token_count)
        ENERGY_JOULES.set(self.totals.total_energy_joules)
        logger.info(
            "Suggestion captured in %s: %d tokens, %s J (total %s J, %s g CO2)",
            document,
            token_count,
            estimate.energy_joules,
            estimate.total_energy_joules,
            estimate.total_emissions_grams,
        )

        record = EpisodeRecord(
            timestamp=self._clock(),
            file_name=PurePath(document).name,
            inserted_text=inserted,
            token_count=token_count,
            energy_joules=estimate.energy_joules,
            total_energy_joules=estimate.total_energy_joules,
            total_emissions_grams=estimate.total_emissions_grams,
        )
        self.last_record = record
        with tracer.start_as_current_span(SPAN_SINK_APPEND) as sink_span:
            try:
                self.sink.append(record)
            except SinkError as exc:
                sink_span.set_attribute(ATTR_SINK_ERROR, True)
                self._report_sink_failure(exc)

        self.display.update(
            DisplayUpdate(
                total_energy_joules=estimate.total_energy_joules,
                last_episode_energy_joules=estimate.energy_joules,
                total_emissions_grams=estimate.total_emissions_grams,
            )
        )
        return OUTCOME_RECORDED

    def _report_sink_failure(self, exc: SinkError) -> None:
        SINK_FAILURES_TOTAL.inc()
        logger.warning("Suggestion log unavailable: %s", exc)
        self.display.notify_error(str(exc))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_session(
    config: AppConfig,
    *,
    timers: TimerService | None = None,
    tokenizer: TokenCounter | None = None,
    sink: LogSink | None = None,
    display: DisplaySurface | None = None,
) -> CaptureSession:
    """Create a ``CaptureSession`` with production defaults for missing collaborators."""
    session = CaptureSession(
        config,
        timers=timers or AsyncioTimerService(),
        tokenizer=tokenizer or TokenCounter.from_config(config.tokenizer),
        sink=sink or FileLogSink(config.sink.log_path),
        display=display,
    )
    logger.info(
        "Capture session ready (debounce=%dms, strategy=%s, log=%s)",
        config.capture.debounce_ms,
        config.capture.extraction_strategy,
        config.sink.log_path,
    )
    return session
