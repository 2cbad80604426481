"""plugin-ratings: weighted usability and health scoring for plugin listings.

This package combines raw per-item signals (average rating, rating count,
active installations, support threads, release metadata) into a 1.0-5.0
usability rating and a 0-100 maintenance health score. Both engines use an
administrator-configurable weight mapping that is validated, persisted
through a WeightStore and only then applied.

Example:
    >>> from plugin_ratings import UsabilityRatingCalculator, InMemoryWeightStore
    >>>
    >>> calculator = UsabilityRatingCalculator(InMemoryWeightStore())
    >>> calculator.calculate({"rating": 4.5, "num_ratings": 150,
    ...                       "active_installs": 50000,
    ...                       "support_threads": 20, "support_threads_resolved": 18})
    4.38

Modules:
    calculator: UsabilityRatingCalculator
    health: HealthScoreCalculator and health color bands
    components: Usability component scoring functions
    weights: Weight validation and configuration ownership
    store: WeightStore protocol and implementations
    report: Combined per-item report
    config: Runtime settings and factories
    errors: Custom exception types
    telemetry: OpenTelemetry and structlog instrumentation
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    # Engines
    "UsabilityRatingCalculator",
    "HealthScoreCalculator",
    "rate_plugin",
    # Data
    "SignalRecord",
    "CalculationBreakdown",
    # Configuration
    "InMemoryWeightStore",
    "YamlWeightStore",
    "RatingsSettings",
    # Errors
    "RatingError",
    "WeightValidationError",
    "WeightPersistenceError",
]

_EXPORTS = {
    "UsabilityRatingCalculator": "plugin_ratings.calculator",
    "HealthScoreCalculator": "plugin_ratings.health",
    "rate_plugin": "plugin_ratings.report",
    "SignalRecord": "plugin_ratings.models",
    "CalculationBreakdown": "plugin_ratings.models",
    "InMemoryWeightStore": "plugin_ratings.store",
    "YamlWeightStore": "plugin_ratings.store",
    "RatingsSettings": "plugin_ratings.config",
    "RatingError": "plugin_ratings.errors",
    "WeightValidationError": "plugin_ratings.errors",
    "WeightPersistenceError": "plugin_ratings.errors",
}


# Lazy imports keep `import plugin_ratings` cheap for the CLI
def __getattr__(name: str) -> object:
    """Lazy import of package components."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
