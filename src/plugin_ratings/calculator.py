"""Usability rating calculator.

Combines four component scores (user rating, rating count, installation
count, support responsiveness) into a 1.0-5.0 rating using administrator
weights:

    weighted_sum = sum(weight * score) over present components
    total_weight = sum(weight) over present components
    normalized   = weighted_sum / total_weight      (0.0 if total_weight == 0)
    final        = clamp(1.0 + normalized * 4.0, 1.0, 5.0)

Renormalizing over present components only means missing signals do not
penalize an item. An item with no usable signal at all scores the scale
minimum, 1.0.

Example:
    >>> calculator = UsabilityRatingCalculator()
    >>> calculator.calculate({
    ...     "rating": 4.5,
    ...     "num_ratings": 150,
    ...     "active_installs": 50000,
    ...     "support_threads": 20,
    ...     "support_threads_resolved": 18,
    ... })
    4.38
    >>> calculator.last_breakdown.weighted_sum
    84.5
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from plugin_ratings._base import (
    BatchInput,
    RecordInput,
    _WeightedCalculator,
    combine_weighted,
)
from plugin_ratings.components import clamp, score_usability_components
from plugin_ratings.models import (
    AlgorithmExplanation,
    CalculationBreakdown,
    ComponentExplanation,
    SignalRecord,
    UsabilityComponent,
)
from plugin_ratings.telemetry import traced
from plugin_ratings.weights import DEFAULT_USABILITY_WEIGHTS

MIN_RATING = 1.0
MAX_RATING = 5.0
RATING_PRECISION = 2

_COMPONENT_TEXT: dict[str, tuple[str, str]] = {
    UsabilityComponent.USER_RATING.value: (
        "User Rating",
        "Average rating given by users",
    ),
    UsabilityComponent.RATING_COUNT.value: (
        "Rating Credibility",
        "Number of ratings (more ratings = higher credibility)",
    ),
    UsabilityComponent.INSTALLATION_COUNT.value: (
        "Popularity",
        "Number of active installations (popularity indicator)",
    ),
    UsabilityComponent.SUPPORT_RESPONSIVENESS.value: (
        "Support Quality",
        "Percentage of resolved support threads",
    ),
}


def scale_rating(normalized: float, total_weight: int) -> float:
    """Map a normalized [0, 1] score onto the 1.0-5.0 rating scale."""
    if total_weight == 0:
        return MIN_RATING
    rating = clamp(MIN_RATING + normalized * (MAX_RATING - MIN_RATING), MIN_RATING, MAX_RATING)
    return round(rating, RATING_PRECISION)


class UsabilityRatingCalculator(_WeightedCalculator):
    """Weighted usability rating engine.

    The only mutable state is the weight configuration (changed through
    update_weights() and reset_weights_to_default()) and the breakdown of
    the most recent calculation.

    Args:
        store: Configuration store read once at construction and written
            through on weight changes. Defaults to an in-memory store.
        key: Storage key. Defaults to ``usability_weights``.

    Example:
        >>> store = InMemoryWeightStore()
        >>> calculator = UsabilityRatingCalculator(store)
        >>> calculator.get_weights()
        {'user_rating': 40, 'rating_count': 20, 'installation_count': 25, 'support_responsiveness': 15}
    """

    storage_key: ClassVar[str] = "usability_weights"
    default_weights: ClassVar[Mapping[str, int]] = DEFAULT_USABILITY_WEIGHTS

    def _evaluate(
        self,
        record: SignalRecord,
        weights: Mapping[str, int],
    ) -> CalculationBreakdown:
        components = score_usability_components(record)
        weighted_sum, total_weight, normalized = combine_weighted(components, weights)
        return CalculationBreakdown(
            components=components,
            weights=dict(weights),
            weighted_sum=weighted_sum,
            total_weight=total_weight,
            normalized_score=normalized,
            final_score=scale_rating(normalized, total_weight),
        )

    @traced(operation_name="ratings.usability.calculate")
    def calculate(self, record: RecordInput) -> float:
        """Calculate the usability rating of one item.

        Never raises on malformed signal data; see last_breakdown for the
        intermediate values.

        Args:
            record: SignalRecord or raw signal mapping.

        Returns:
            Rating between 1.0 and 5.0, rounded to two decimals.
        """
        return self._calculate(record).final_score

    @traced(operation_name="ratings.usability.calculate_batch")
    def calculate_batch(
        self,
        records: BatchInput,
        max_workers: int | None = None,
    ) -> dict[Any, float]:
        """Calculate ratings for many items.

        Args:
            records: Mapping of item id to record, or an iterable of records
                carrying a ``slug`` (records without one are skipped).
            max_workers: Evaluate in a thread pool of this size when > 1.

        Returns:
            Mapping of item id to rating. Duplicate ids keep the last result.
        """
        breakdowns = self._calculate_batch(records, max_workers=max_workers)
        return {item_id: breakdown.final_score for item_id, breakdown in breakdowns.items()}

    def get_algorithm_explanation(self) -> AlgorithmExplanation:
        """Describe the usability rating algorithm and its current weights."""
        weights = self._config.current
        return AlgorithmExplanation(
            title="Usability Rating Algorithm",
            description=(
                "The usability rating combines multiple factors to provide an overall "
                "assessment of plugin usability and quality. Components without data "
                "are left out and the remaining weights are renormalized."
            ),
            components={
                name: ComponentExplanation(label=label, description=description, weight=weights[name])
                for name, (label, description) in _COMPONENT_TEXT.items()
            },
            scale="Final rating is scaled from 1.0 to 5.0 stars",
        )


__all__ = [
    "MAX_RATING",
    "MIN_RATING",
    "UsabilityRatingCalculator",
    "scale_rating",
]
