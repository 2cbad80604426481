"""Weight configuration validation and ownership.

WeightConfiguration owns the current weight mapping of one calculator and
its write-through to a WeightStore. It has exactly two legal transitions,
update() and reset(); both validate first, persist second and swap the
in-memory mapping last, so a rejected or unpersisted change never applies.

Validation order (first failure wins):
    1. every required component key is present with a numeric value
    2. every weight is an integer in [0, 100]
    3. the weights sum to exactly 100

Example:
    >>> config = WeightConfiguration(
    ...     store=InMemoryWeightStore(),
    ...     key="usability_weights",
    ...     defaults=DEFAULT_USABILITY_WEIGHTS,
    ... )
    >>> config.update({"user_rating": 50, "rating_count": 15,
    ...                "installation_count": 20, "support_responsiveness": 15})
    {'user_rating': 50, 'rating_count': 15, 'installation_count': 20, 'support_responsiveness': 15}
"""

from __future__ import annotations

import math
import threading
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

import structlog

from plugin_ratings.errors import (
    InvalidWeightRangeError,
    InvalidWeightTotalError,
    MissingComponentError,
    WeightPersistenceError,
    WeightValidationError,
)
from plugin_ratings.models import HealthComponent, UsabilityComponent
from plugin_ratings.store import InMemoryWeightStore, WeightStore

logger = structlog.get_logger(__name__)

WEIGHT_TOTAL = 100
MIN_WEIGHT = 0
MAX_WEIGHT = 100

DEFAULT_USABILITY_WEIGHTS: Mapping[str, int] = MappingProxyType(
    {
        UsabilityComponent.USER_RATING.value: 40,
        UsabilityComponent.RATING_COUNT.value: 20,
        UsabilityComponent.INSTALLATION_COUNT.value: 25,
        UsabilityComponent.SUPPORT_RESPONSIVENESS.value: 15,
    }
)

DEFAULT_HEALTH_WEIGHTS: Mapping[str, int] = MappingProxyType(
    {
        HealthComponent.UPDATE_FREQUENCY.value: 30,
        HealthComponent.WP_COMPATIBILITY.value: 25,
        HealthComponent.SUPPORT_RESPONSE.value: 20,
        HealthComponent.TIME_SINCE_UPDATE.value: 15,
        HealthComponent.REPORTED_ISSUES.value: 10,
    }
)


def _read_weight(value: Any) -> float | None:
    """Read a numeric weight, or None when the value is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # ints beyond float range saturate
            return math.inf if value > 0 else -math.inf
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def validate_weights(
    candidate: Mapping[str, Any],
    components: Sequence[str],
) -> dict[str, int]:
    """Validate a candidate weight mapping against the required components.

    Keys that are not component names are ignored.

    Args:
        candidate: Mapping of component name to weight.
        components: Required component names, in reporting order.

    Returns:
        A new dict of component name to integer weight, in component order.

    Raises:
        MissingComponentError: A component key is absent or not numeric.
        InvalidWeightRangeError: A weight is not an integer in [0, 100].
        InvalidWeightTotalError: The weights do not sum to 100.
    """
    if not isinstance(candidate, Mapping):
        raise MissingComponentError(components[0])

    numbers: dict[str, float] = {}
    for component in components:
        number = _read_weight(candidate.get(component))
        if number is None:
            raise MissingComponentError(component)
        numbers[component] = number

    weights: dict[str, int] = {}
    for component, number in numbers.items():
        if not number.is_integer() or not MIN_WEIGHT <= number <= MAX_WEIGHT:
            raise InvalidWeightRangeError(component, candidate.get(component))
        weights[component] = int(number)

    total = sum(weights.values())
    if total != WEIGHT_TOTAL:
        raise InvalidWeightTotalError(total)

    return weights


class WeightConfiguration:
    """Current weight mapping of one calculator plus its durable store.

    Thread Safety:
        update() and reset() are serialized by a lock. Readers take the
        current mapping without locking; it is replaced wholesale, never
        mutated, so a reader never observes a partial update.

    Attributes:
        key: Namespaced storage key for this configuration.
        components: Required component names.
    """

    def __init__(
        self,
        store: WeightStore | None,
        key: str,
        defaults: Mapping[str, int],
    ) -> None:
        """Load the configuration from the store.

        Falls back to ``defaults`` (without writing) when the store holds
        nothing under ``key`` or holds an invalid mapping.

        Args:
            store: Configuration store. Defaults to a new InMemoryWeightStore.
            key: Namespaced storage key.
            defaults: Default weights; its keys define the components.
        """
        self._store = store if store is not None else InMemoryWeightStore()
        self.key = key
        self.components: tuple[str, ...] = tuple(defaults)
        self._defaults: Mapping[str, int] = MappingProxyType(dict(defaults))
        self._write_lock = threading.Lock()
        self._log = logger.bind(key=key)
        self._weights: Mapping[str, int] = self._load()

    def _load(self) -> Mapping[str, int]:
        stored = self._store.read(self.key)
        if stored is None:
            self._log.debug("stored_weights_absent")
            return self._defaults
        try:
            weights = validate_weights(stored, self.components)
        except WeightValidationError as exc:
            self._log.warning(
                "stored_weights_invalid",
                kind=exc.code,
                error=str(exc),
            )
            return self._defaults
        self._log.debug("stored_weights_loaded", weights=weights)
        return MappingProxyType(weights)

    @property
    def current(self) -> Mapping[str, int]:
        """Read-only view of the current weights (never mutated in place)."""
        return self._weights

    def snapshot(self) -> dict[str, int]:
        """Return a copy of the current weights."""
        return dict(self._weights)

    def update(self, candidate: Mapping[str, Any]) -> dict[str, int]:
        """Validate, persist and apply a new weight configuration.

        Args:
            candidate: Mapping of component name to weight.

        Returns:
            Copy of the applied weights.

        Raises:
            WeightValidationError: Candidate rejected; nothing changed.
            WeightPersistenceError: Store write failed; nothing changed.
        """
        try:
            weights = validate_weights(candidate, self.components)
        except WeightValidationError as exc:
            self._log.info(
                "weights_rejected",
                kind=exc.code,
                component=exc.component,
            )
            raise
        self._apply(weights)
        self._log.info("weights_updated", weights=weights)
        return dict(weights)

    def reset(self) -> dict[str, int]:
        """Persist and apply the default weights.

        Raises:
            WeightPersistenceError: Store write failed; nothing changed.
        """
        weights = dict(self._defaults)
        self._apply(weights)
        self._log.info("weights_reset", weights=weights)
        return weights

    def _apply(self, weights: dict[str, int]) -> None:
        with self._write_lock:
            self._persist(weights)
            self._weights = MappingProxyType(dict(weights))

    def _persist(self, weights: dict[str, int]) -> None:
        try:
            written = self._store.write(self.key, dict(weights))
        except Exception as exc:
            self._log.error("weights_persist_failed", error=str(exc))
            raise WeightPersistenceError(self.key, reason=str(exc)) from exc
        if not written:
            self._log.error("weights_persist_failed", error="store rejected write")
            raise WeightPersistenceError(self.key, reason="store rejected write")


__all__ = [
    "DEFAULT_HEALTH_WEIGHTS",
    "DEFAULT_USABILITY_WEIGHTS",
    "WEIGHT_TOTAL",
    "WeightConfiguration",
    "validate_weights",
]
