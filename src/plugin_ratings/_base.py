"""Shared machinery for weighted multi-component calculators.

_WeightedCalculator holds a WeightConfiguration, tracks the most recent
breakdown and evaluates batches. Subclasses implement _evaluate(), a pure
function of one record and one weight snapshot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any, ClassVar, Union

import structlog

from plugin_ratings.components import clamp
from plugin_ratings.models import (
    AlgorithmExplanation,
    CalculationBreakdown,
    SignalRecord,
    coerce_record,
)
from plugin_ratings.store import WeightStore
from plugin_ratings.telemetry import traced
from plugin_ratings.weights import WeightConfiguration

logger = structlog.get_logger(__name__)

RecordInput = Union[SignalRecord, Mapping[str, Any]]
BatchInput = Union[Mapping[Any, RecordInput], Iterable[RecordInput]]

MAX_WORKERS_LIMIT = 32


def combine_weighted(
    components: Mapping[str, float | None],
    weights: Mapping[str, int],
) -> tuple[float, int, float]:
    """Combine present component scores into a renormalized average.

    Absent (None) components contribute neither score nor weight, so missing
    signals do not penalize the item.

    Args:
        components: Component name to score in [0, 1], or None when absent.
        weights: Component name to integer weight.

    Returns:
        Tuple of (weighted_sum, total_weight, normalized). normalized is 0.0
        when total_weight is 0.
    """
    weighted_sum = 0.0
    total_weight = 0
    for name, score in components.items():
        if score is None:
            continue
        weight = weights[name]
        weighted_sum += weight * score
        total_weight += weight

    if total_weight == 0:
        return weighted_sum, 0, 0.0
    return weighted_sum, total_weight, clamp(weighted_sum / total_weight, 0.0, 1.0)


def batch_items(records: BatchInput) -> list[tuple[Any, SignalRecord]]:
    """Pair each record with its item identifier.

    A mapping is read as {item_id: record}. Any other iterable is read as
    records carrying a ``slug``; records without one are skipped.
    """
    if isinstance(records, Mapping):
        return [(item_id, coerce_record(record)) for item_id, record in records.items()]

    items: list[tuple[Any, SignalRecord]] = []
    for raw in records:
        record = coerce_record(raw)
        if record.slug is None:
            logger.debug("batch_record_without_slug_skipped")
            continue
        items.append((record.slug, record))
    return items


class _WeightedCalculator(ABC):
    """Base class for calculators driven by a validated weight configuration.

    Subclasses define ``storage_key`` and ``default_weights`` and implement
    _evaluate() and get_algorithm_explanation().
    """

    storage_key: ClassVar[str]
    default_weights: ClassVar[Mapping[str, int]]

    def __init__(self, store: WeightStore | None = None, *, key: str | None = None) -> None:
        self._config = WeightConfiguration(
            store=store,
            key=key or self.storage_key,
            defaults=self.default_weights,
        )
        self._last_breakdown: CalculationBreakdown | None = None
        self._log = logger.bind(calculator=type(self).__name__, key=self._config.key)

    @abstractmethod
    def _evaluate(
        self,
        record: SignalRecord,
        weights: Mapping[str, int],
    ) -> CalculationBreakdown:
        """Compute the breakdown of one record under one weight snapshot."""

    @abstractmethod
    def get_algorithm_explanation(self) -> AlgorithmExplanation:
        """Describe the algorithm and its current weights."""

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def _calculate(self, record: RecordInput) -> CalculationBreakdown:
        breakdown = self._evaluate(coerce_record(record), self._config.current)
        self._last_breakdown = breakdown
        return breakdown

    def calculate_breakdown(self, record: RecordInput) -> CalculationBreakdown:
        """Calculate one item and return its full breakdown."""
        return self._calculate(record)

    def _calculate_batch(
        self,
        records: BatchInput,
        max_workers: int | None = None,
    ) -> dict[Any, CalculationBreakdown]:
        items = batch_items(records)
        weights = self._config.current

        if max_workers is not None and max_workers > 1 and len(items) > 1:
            workers = min(max_workers, MAX_WORKERS_LIMIT)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                breakdowns = list(
                    executor.map(lambda item: self._evaluate(item[1], weights), items)
                )
        else:
            breakdowns = [self._evaluate(record, weights) for _, record in items]

        results: dict[Any, CalculationBreakdown] = {}
        for (item_id, _), breakdown in zip(items, breakdowns):
            results[item_id] = breakdown
        if breakdowns:
            self._last_breakdown = breakdowns[-1]

        self._log.debug(
            "batch_calculated",
            items=len(items),
            unique_items=len(results),
            max_workers=max_workers,
        )
        return results

    @property
    def last_breakdown(self) -> CalculationBreakdown | None:
        """Breakdown of the most recent calculation, or None before any."""
        return self._last_breakdown

    def get_calculation_breakdown(self) -> CalculationBreakdown | None:
        """Return the breakdown of the most recent calculation."""
        return self._last_breakdown

    # -------------------------------------------------------------------------
    # Weight configuration
    # -------------------------------------------------------------------------

    @property
    def components(self) -> tuple[str, ...]:
        """Component names, in scoring order."""
        return self._config.components

    def get_weights(self) -> dict[str, int]:
        """Return a copy of the current weights."""
        return self._config.snapshot()

    @traced(operation_name="ratings.update_weights")
    def update_weights(self, weights: Mapping[str, Any]) -> dict[str, int]:
        """Validate, persist and apply new weights.

        Raises:
            WeightValidationError: Weights rejected; configuration unchanged.
            WeightPersistenceError: Store write failed; configuration unchanged.
        """
        return self._config.update(weights)

    @traced(operation_name="ratings.reset_weights")
    def reset_weights_to_default(self) -> dict[str, int]:
        """Persist and apply the default weights.

        Raises:
            WeightPersistenceError: Store write failed; configuration unchanged.
        """
        return self._config.reset()
