from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

ExtractionStrategy = Literal["positional", "char_diff"]
DocumentSwitchPolicy = Literal["abandon", "flush"]


class CaptureConfig(BaseModel):
    """Heuristics that delimit a suggestion episode."""

    debounce_ms: int = Field(
        default=4000,
        gt=0,
        description="Quiet period after the last significant edit before flushing",
    )
    min_insert_length: int = Field(
        default=3,
        ge=0,
        description="Trimmed inserted length that marks a single-line edit as significant",
    )
    min_insert_length_inclusive: bool = Field(
        default=False,
        description="Treat a trimmed length equal to min_insert_length as significant",
    )
    extraction_strategy: ExtractionStrategy = Field(
        default="char_diff",
        description="How inserted text is recovered from the episode snapshots",
    )
    on_document_switch: DocumentSwitchPolicy = Field(
        default="abandon",
        description="What happens to an open episode when the active document changes",
    )


class EstimatorConfig(BaseModel):
    """Token to energy to emissions conversion constants."""

    joules_per_token: float = Field(
        default=2.16, gt=0, description="Energy attributed to one token"
    )
    grid_intensity_g_per_kwh: float = Field(
        default=77.0, ge=0, description="Grid carbon intensity (g CO2 per kWh)"
    )
    min_tokens: int = Field(
        default=1,
        ge=0,
        description="Episodes with fewer tokens are not recorded",
    )
    precision: int = Field(
        default=2, ge=0, description="Decimal places of published values"
    )


class TokenizerConfig(BaseModel):
    """Tokenizer used to count tokens of captured insertions."""

    model_name: str | None = Field(
        default="gpt-3.5-turbo",
        description="Model whose tokenizer is used (takes precedence over encoding)",
    )
    encoding_name: str = Field(
        default="cl100k_base",
        description="tiktoken encoding used when no model name is set",
    )


class SinkConfig(BaseModel):
    """Append-only suggestion log."""

    log_path: Path = Field(
        default=Path.home() / ".suggestion_meter" / "suggestion_log.txt",
        description="File that receives captured suggestion records",
    )
    enabled_on_start: bool = Field(
        default=True, description="Whether logging starts enabled"
    )


class LoggingConfig(BaseModel):
    """Process logging settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=False,
        description="Emit JSON lines instead of human-readable output",
    )
    file: Path | None = Field(
        default=None,
        description="Also write process logs to this file",
    )


class TracingConfig(BaseModel):
    """OpenTelemetry tracing settings."""

    enabled: bool = Field(default=False, description="Enable OTLP span export")
    endpoint: str = Field(default="", description="OTLP HTTP traces endpoint")
    service_name: str = Field(
        default="suggestion-meter", description="service.name resource attribute"
    )
    sample_rate: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Root span sampling ratio"
    )


class MetricsConfig(BaseModel):
    """Prometheus exposition settings."""

    port: int | None = Field(
        default=None, description="Serve /metrics on this port when set"
    )
