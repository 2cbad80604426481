"""Shared fixtures for plugin-ratings tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
import structlog

from plugin_ratings.calculator import UsabilityRatingCalculator
from plugin_ratings.health import HealthScoreCalculator
from plugin_ratings.store import InMemoryWeightStore
from plugin_ratings.telemetry import reset_tracer

FIXED_NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolate_logging_and_tracing() -> Any:
    """Restore structlog defaults and drop cached tracers after each test."""
    yield
    structlog.reset_defaults()
    reset_tracer()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep PLUGIN_RATINGS_* variables from the host out of the tests."""
    for name in (
        "PLUGIN_RATINGS_WEIGHTS_FILE",
        "PLUGIN_RATINGS_PLATFORM_VERSION",
        "PLUGIN_RATINGS_LOG_LEVEL",
        "PLUGIN_RATINGS_JSON_LOGS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def worked_example() -> dict[str, Any]:
    """Signal record whose default-weight rating is 4.38."""
    return {
        "slug": "contact-form",
        "rating": 4.5,
        "num_ratings": 150,
        "active_installs": 50000,
        "support_threads": 20,
        "support_threads_resolved": 18,
    }


@pytest.fixture
def healthy_plugin() -> dict[str, Any]:
    """Signal record with complete maintenance data, released 10 days before FIXED_NOW."""
    return {
        "slug": "well-kept",
        "version": "2.1.7",
        "last_updated": "2024-02-20",
        "tested": "6.4",
        "support_threads": 20,
        "support_threads_resolved": 18,
        "ratings": {5: 90, 4: 5, 3: 3, 2: 1, 1: 1},
    }


@pytest.fixture
def store() -> InMemoryWeightStore:
    return InMemoryWeightStore()


@pytest.fixture
def calculator(store: InMemoryWeightStore) -> UsabilityRatingCalculator:
    return UsabilityRatingCalculator(store)


@pytest.fixture
def health_calculator(store: InMemoryWeightStore) -> HealthScoreCalculator:
    return HealthScoreCalculator(store, platform_version="6.4", clock=lambda: FIXED_NOW)
