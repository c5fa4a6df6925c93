"""CLI commands: replay a recorded session, check the suggestion log."""

import logging
import sys
from pathlib import Path
from typing import TextIO

from suggestion_meter.configs.config import AppConfig, get_app_config
from suggestion_meter.core.capture.service import CaptureService
from suggestion_meter.core.capture.session import build_session
from suggestion_meter.core.sink.base import SinkError
from suggestion_meter.core.sink.display import StatusLineDisplay
from suggestion_meter.core.sink.file import FileLogSink
from suggestion_meter.infra.logging import setup_logging
from suggestion_meter.infra.metrics import serve_metrics
from suggestion_meter.infra.telemetry import init_telemetry, shutdown_telemetry

from .replay import ReplayRunner, load_steps

logger = logging.getLogger(__name__)


def _load_config(debug: bool, log_path: Path | None) -> AppConfig:
    config = get_app_config()
    if debug:
        config.logging.level = "DEBUG"
    if log_path is not None:
        config.sink.log_path = log_path
    return config


async def replay(
    events_path: Path,
    speed: float = 1.0,
    flush_on_exit: bool = True,
    log_path: Path | None = None,
    metrics_port: int | None = None,
    debug: bool = False,
    output: TextIO = sys.stdout,
) -> None:
    """Replay ``events_path`` through a fresh capture session.

    Parameters
    ----------
    events_path
        JSONL recording of editor steps.
    speed
        Replay speed factor; also shortens the debounce window.
    flush_on_exit
        Flush an episode still open after the last step.
    log_path
        Override for the suggestion log location.
    metrics_port
        Serve Prometheus metrics on this port while replaying.
    debug
        Enable debug logging.
    output
        Stream receiving the status line.
    """
    config = _load_config(debug, log_path)
    setup_logging(config.logging)
    init_telemetry(config.tracing)

    port = metrics_port if metrics_port is not None else config.metrics.port
    if port is not None:
        serve_metrics(port)

    config.capture.debounce_ms = max(1, int(config.capture.debounce_ms / speed))

    steps = load_steps(events_path)
    session = build_session(config, display=StatusLineDisplay(output))
    service = CaptureService(session)
    await service.start()
    try:
        submitted = await ReplayRunner(service, speed=speed).run(steps)
    finally:
        await service.stop(flush_pending=flush_on_exit)
        shutdown_telemetry()

    totals = session.totals
    logger.info(
        "Replayed %d message(s): %d episode(s), %.2f J, %.2f g CO2",
        submitted,
        totals.episodes,
        totals.total_energy_joules,
        totals.total_emissions_grams,
    )


def check_log(log_path: Path | None = None, output: TextIO = sys.stdout) -> bool:
    """Append a test entry to the suggestion log.  Returns success."""
    config = _load_config(False, log_path)
    setup_logging(config.logging)
    sink = FileLogSink(config.sink.log_path)
    try:
        sink.write_test_entry()
    except SinkError as exc:
        output.write(f"❌ {exc}\n")
        return False
    output.write(f"Successfully wrote to log file at: {sink.path}\n")
    return True
