"""Configuration management using pydantic-settings.

**Not a singleton**: each call to ``get_app_config()`` re-reads config
from disk so that edits to the YAML files are picked up on the next
session.

Priority order (highest first):

1. Init kwargs (tests, CLI overrides)
2. Override YAML (path from ``SUGGESTION_METER_CONFIG_FILE`` env var)
3. Environment variables (``SUGGESTION_METER_`` prefix)
4. ``.env`` dotenv file
5. Static YAML (``configs/config.yaml`` in the working directory)
6. File secrets
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import (
    CaptureConfig,
    EstimatorConfig,
    LoggingConfig,
    MetricsConfig,
    SinkConfig,
    TokenizerConfig,
    TracingConfig,
)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_DIR = Path("configs")
STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"
DOTENV_FILE_PATH = Path(".env")

ENV_DELIMITER = "__"  # Nested environment variable delimiter
ENV_PREFIX = "SUGGESTION_METER_"
OVERRIDE_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"

DEFAULT_ENCODING = "utf-8"


def _override_config_file() -> Optional[Path]:
    value = os.environ.get(OVERRIDE_FILE_ENV)
    return Path(value) if value else None


# ---------------------------------------------------------------------------
# Application config (re-created on every call, not a singleton)
# ---------------------------------------------------------------------------


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    capture: CaptureConfig = Field(
        default_factory=CaptureConfig,
        description="Episode detection and extraction settings",
    )

    estimator: EstimatorConfig = Field(
        default_factory=EstimatorConfig,
        description="Energy and emissions conversion constants",
    )

    tokenizer: TokenizerConfig = Field(
        default_factory=TokenizerConfig,
        description="Tokenizer selection",
    )

    sink: SinkConfig = Field(
        default_factory=SinkConfig,
        description="Suggestion log settings",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Process logging settings",
    )

    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="OpenTelemetry tracing settings",
    )

    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Prometheus metrics settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings]

        # Override YAML named by the environment
        override_file = _override_config_file()
        if override_file is not None and override_file.is_file():
            sources.append(
                YamlConfigSettingsSource(settings_cls, yaml_file=override_file)
            )

        sources.append(env_settings)
        sources.append(dotenv_settings)

        # Static YAML in the working directory
        sources.append(YamlConfigSettingsSource(settings_cls))

        sources.append(file_secret_settings)
        return tuple(sources)


def get_app_config() -> AppConfig:
    """Get the application configuration.

    Re-reads the YAML sources on every call.
    """
    return AppConfig()
