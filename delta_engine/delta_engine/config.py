"""Engine configuration: per-call options and environment-backed defaults."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_FLOAT_TOLERANCE = 1e-6
DEFAULT_MAX_DEPTH = 100


class EngineConfig(BaseModel):
    """Read-only options for a single comparison.

    The config is passed explicitly to every :func:`compare` call; the engine
    keeps no module-level state.
    """

    model_config = ConfigDict(frozen=True)

    excluded_fields: frozenset[str] = Field(
        default_factory=frozenset,
        description="Field names skipped at every nesting level.",
    )
    max_depth: int | None = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=0,
        description="Deepest nesting level compared structurally; None disables the guard.",
    )
    float_tolerance: float = Field(
        default=DEFAULT_FLOAT_TOLERANCE,
        ge=0.0,
        description="Maximum absolute difference for two floats to count as unchanged.",
    )

    def is_excluded(self, name: str) -> bool:
        return name in self.excluded_fields


class Settings(BaseSettings):
    """Process-wide defaults loaded from environment variables with DELTA_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="DELTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    debug: bool = False

    # Comparison defaults
    excluded_fields: frozenset[str] = frozenset()
    max_depth: int | None = DEFAULT_MAX_DEPTH
    float_tolerance: float = DEFAULT_FLOAT_TOLERANCE

    # Rendering
    pretty_json: bool = False

    # Telemetry
    structured_logging: bool = False
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    def engine_config(self) -> EngineConfig:
        """Build the per-call config these settings describe."""
        return EngineConfig(
            excluded_fields=self.excluded_fields,
            max_depth=self.max_depth,
            float_tolerance=self.float_tolerance,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded settings: excluded_fields=%s max_depth=%s float_tolerance=%s",
            sorted(settings.excluded_fields),
            settings.max_depth,
            settings.float_tolerance,
        )

    return settings
