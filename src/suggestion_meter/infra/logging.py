"""Process logging bootstrap.

Process logs are diagnostics about the meter itself and are kept apart
from the suggestion log (``core.sink.file``) and from the status line on
stdout.  They go to stderr and, optionally, to ``LoggingConfig.file``,
as JSON lines (``json_output=True``) or as short human-readable lines.

Records emitted inside an ``episode.flush`` span carry its trace and
span IDs.  Plain lines show the first eight hex digits of the trace ID
so the lines of one flush can be grouped by eye.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from suggestion_meter.configs.system import LoggingConfig

_PLAIN_FORMAT = "%(levelprefix)s %(asctime)s %(name)s%(trace_hint)s  %(message)s"
_PLAIN_DATEFMT = "%H:%M:%S"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"

_NOISY_LOGGERS = ("opentelemetry", "urllib3", "tiktoken")


class _SpanContextFilter(logging.Filter):
    """Adds ``trace_id``, ``span_id`` and ``trace_hint`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        if ctx is not None and ctx.is_valid:
            trace_id = format(ctx.trace_id, "032x")
            record.trace_id = trace_id  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
            record.trace_hint = f" [{trace_id[:8]}]"  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
            record.trace_hint = ""  # type: ignore[attr-defined]
        return True


def build_formatter(json_output: bool, use_colors: bool = False) -> logging.Formatter:
    if json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"trace_id": "", "span_id": ""},
        )
    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(
        fmt=_PLAIN_FORMAT,
        datefmt=_PLAIN_DATEFMT,
        use_colors=use_colors,
    )


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger (call once at startup).

    Replaces any handlers already installed on the root logger, so calling
    it again with a different config reconfigures logging.
    """
    if config is None:
        config = LoggingConfig()

    root = logging.getLogger()
    root.setLevel(config.level.upper())

    span_filter = _SpanContextFilter()

    # Level colours only on an interactive terminal, never in the log file.
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        build_formatter(config.json_output, use_colors=sys.stderr.isatty())
    )
    handlers: list[logging.Handler] = [console]
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.file, encoding="utf-8")
        file_handler.setFormatter(build_formatter(config.json_output))
        handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(span_filter)

    for old in root.handlers:
        if isinstance(old, logging.FileHandler):
            old.close()
    root.handlers = handlers

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
