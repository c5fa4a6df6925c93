"""OpenTelemetry bootstrap: tracing initialisation and span names.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a graceful no-op
and ``tracer`` hands out non-recording spans.

Usage::

    from suggestion_meter.infra.telemetry import SPAN_EPISODE_FLUSH, tracer

    with tracer.start_as_current_span(SPAN_EPISODE_FLUSH) as span:
        ...
"""

from __future__ import annotations

import logging

from opentelemetry import trace

from suggestion_meter.configs.system import TracingConfig

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("suggestion_meter")

_provider = None

# ---------------------------------------------------------------------------
# Span names: single source of truth for all custom spans
# ---------------------------------------------------------------------------

SPAN_EPISODE_FLUSH = "episode.flush"
SPAN_SINK_APPEND = "sink.append"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_EPISODE_DOCUMENT = "episode.document"
ATTR_EPISODE_EDITS = "episode.edit_count"
ATTR_EPISODE_DELTA_LEN = "episode.delta_len"
ATTR_EPISODE_TOKENS = "episode.token_count"
ATTR_EPISODE_OUTCOME = "episode.outcome"
ATTR_SINK_ERROR = "sink.error"


def init_telemetry(settings: TracingConfig | None = None) -> None:
    """Initialise the OTEL ``TracerProvider``.

    Parameters
    ----------
    settings:
        Tracing configuration.  When ``None`` or ``enabled`` is
        ``False``, this function is a no-op.
    """
    global _provider  # noqa: PLW0603

    if settings is None or not settings.enabled:
        logger.debug("OpenTelemetry tracing disabled.")
        return

    if not settings.endpoint:
        logger.warning(
            "Tracing enabled but no endpoint configured; "
            "skipping OpenTelemetry setup."
        )
        return

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})
    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
    )
    trace.set_tracer_provider(provider)
    _provider = provider

    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )


def shutdown_telemetry() -> None:
    """Export buffered spans and stop the provider.

    A replay is short-lived, so spans still queued in the batch processor
    are exported here before the process exits.
    """
    global _provider  # noqa: PLW0603

    if _provider is None:
        return
    _provider.shutdown()
    _provider = None
