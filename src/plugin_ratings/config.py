"""Runtime settings and calculator factories.

RatingsSettings is an immutable pydantic model. from_env() reads it from
``PLUGIN_RATINGS_*`` environment variables; the factories below turn it into
a configured store and calculators.

Example:
    >>> settings = RatingsSettings.from_env()
    >>> store = build_store(settings)
    >>> usability = build_usability_calculator(settings, store)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plugin_ratings.calculator import UsabilityRatingCalculator
from plugin_ratings.health import DEFAULT_PLATFORM_VERSION, HealthScoreCalculator
from plugin_ratings.store import InMemoryWeightStore, WeightStore, YamlWeightStore

ENV_PREFIX = "PLUGIN_RATINGS_"
_TRUE_VALUES = ("true", "1", "yes", "on")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RatingsSettings(BaseModel):
    """Settings for the rating engines.

    Attributes:
        weights_file: YAML settings document backing weight storage. When
            None, weights live in memory for the life of the process.
        usability_key: Storage key of the usability weights.
        health_key: Storage key of the health weights.
        platform_version: Current platform release for compatibility scoring.
        log_level: Minimum structlog level.
        json_logs: Emit JSON log lines instead of console output.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    weights_file: Path | None = None
    usability_key: str = Field(default="usability_weights", min_length=1)
    health_key: str = Field(default="health_weights", min_length=1)
    platform_version: str = Field(
        default=DEFAULT_PLATFORM_VERSION,
        pattern=r"^\d+(\.\d+)*$",
    )
    log_level: LogLevel = "INFO"
    json_logs: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RatingsSettings:
        """Build settings from ``PLUGIN_RATINGS_*`` environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Environment mapping. Defaults to os.environ.

        Raises:
            pydantic.ValidationError: A variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        weights_file = env.get(f"{ENV_PREFIX}WEIGHTS_FILE", "").strip()
        if weights_file:
            values["weights_file"] = Path(weights_file).expanduser()

        platform_version = env.get(f"{ENV_PREFIX}PLATFORM_VERSION", "").strip()
        if platform_version:
            values["platform_version"] = platform_version

        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip()
        if log_level:
            values["log_level"] = log_level

        json_logs = env.get(f"{ENV_PREFIX}JSON_LOGS")
        if json_logs is not None:
            values["json_logs"] = json_logs.strip().lower() in _TRUE_VALUES

        return cls(**values)


def build_store(settings: RatingsSettings) -> WeightStore:
    """Return the YAML store for ``weights_file``, else an in-memory store."""
    if settings.weights_file is None:
        return InMemoryWeightStore()
    return YamlWeightStore(settings.weights_file)


def build_usability_calculator(
    settings: RatingsSettings,
    store: WeightStore | None = None,
) -> UsabilityRatingCalculator:
    return UsabilityRatingCalculator(
        store if store is not None else build_store(settings),
        key=settings.usability_key,
    )


def build_health_calculator(
    settings: RatingsSettings,
    store: WeightStore | None = None,
) -> HealthScoreCalculator:
    return HealthScoreCalculator(
        store if store is not None else build_store(settings),
        key=settings.health_key,
        platform_version=settings.platform_version,
    )


__all__ = [
    "ENV_PREFIX",
    "RatingsSettings",
    "build_health_calculator",
    "build_store",
    "build_usability_calculator",
]
