"""Prometheus metrics for the capture pipeline.

All metrics use the ``suggestion_meter_`` prefix.  They live in the
default registry; ``serve_metrics`` exposes them over HTTP for long
running sessions.
"""

import logging

from prometheus_client import Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Edit stream metrics
# ---------------------------------------------------------------------------

EDIT_EVENTS_TOTAL = Counter(
    "suggestion_meter_edit_events_total",
    "Edit notifications seen by the episode state machine",
    ["significant"],  # "true" | "false"
)

# ---------------------------------------------------------------------------
# Episode metrics
# ---------------------------------------------------------------------------

EPISODES_TOTAL = Counter(
    "suggestion_meter_episodes_total",
    "Flushed episodes, by outcome",
    ["outcome"],  # recorded | empty | below_threshold | tokenizer_error
)

EPISODES_ABANDONED_TOTAL = Counter(
    "suggestion_meter_episodes_abandoned_total",
    "Open episodes dropped because the active document changed",
)

TOKENS_TOTAL = Counter(
    "suggestion_meter_tokens_total",
    "Tokens counted in recorded episodes",
)

ENERGY_JOULES = Gauge(
    "suggestion_meter_energy_joules",
    "Cumulative estimated energy of the most recent session",
)

# ---------------------------------------------------------------------------
# Sink metrics
# ---------------------------------------------------------------------------

SINK_FAILURES_TOTAL = Counter(
    "suggestion_meter_sink_failures_total",
    "Records that could not be appended to the suggestion log",
)


def serve_metrics(port: int) -> None:
    """Expose the default registry on ``port``."""
    start_http_server(port)
    logger.info("Prometheus metrics served on :%d/metrics", port)
