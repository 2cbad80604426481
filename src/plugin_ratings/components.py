"""Component scoring functions for the usability rating.

Each function maps raw signals to a score in [0.0, 1.0], or None when the
signal is unavailable and the component must be excluded from the weighted
sum. Support responsiveness is the exception: without any support threads it
scores a neutral 0.5 instead of being excluded.

Raw values are clamped to their valid range before scoring, so negative or
enormous inputs degrade to the nearest defined behavior rather than raising.

Stepped components are driven by ordered threshold tables of
``(upper_bound_exclusive, score)`` pairs plus a top score for values at or
above the last bound.
"""

from __future__ import annotations

from collections.abc import Sequence

from plugin_ratings.models import SignalRecord, UsabilityComponent

ThresholdTable = Sequence[tuple[float, float]]

MAX_RATING = 5.0
COUNT_CEILING = 1e18
"""Upper clamp for count signals; larger values saturate."""

RATING_COUNT_STEPS: ThresholdTable = (
    (10, 0.4),
    (100, 0.6),
    (1000, 0.8),
)
RATING_COUNT_TOP = 1.0

INSTALLATION_STEPS: ThresholdTable = (
    (100, 0.2),
    (1_000, 0.3),
    (10_000, 0.5),
    (100_000, 0.7),
    (1_000_000, 0.9),
)
INSTALLATION_TOP = 1.0

SUPPORT_NEUTRAL_SCORE = 0.5
SUPPORT_RESOLUTION_BONUS = 0.1


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def clamp_count(value: float | None) -> float:
    """Clamp a raw count into [0, COUNT_CEILING]; None counts as 0."""
    if value is None:
        return 0.0
    return clamp(value, 0.0, COUNT_CEILING)


def step_score(value: float, steps: ThresholdTable, top: float) -> float:
    """Look up the score for value in an ordered threshold table.

    Args:
        value: Non-negative magnitude to classify.
        steps: Ascending (upper_bound_exclusive, score) pairs.
        top: Score for values at or above the last bound.

    Returns:
        The score of the first step whose bound exceeds value.

    Example:
        >>> step_score(150, RATING_COUNT_STEPS, RATING_COUNT_TOP)
        0.8
        >>> step_score(1000, RATING_COUNT_STEPS, RATING_COUNT_TOP)
        1.0
    """
    for bound, score in steps:
        if value < bound:
            return score
    return top


def score_user_rating(rating: float | None) -> float | None:
    """Score the average user rating as rating / 5.

    Returns None when the rating is absent or not positive.
    """
    value = clamp(rating or 0.0, 0.0, MAX_RATING)
    if value <= 0:
        return None
    return value / MAX_RATING


def score_rating_count(num_ratings: float | None) -> float | None:
    """Score rating credibility by the number of ratings."""
    count = clamp_count(num_ratings)
    if count <= 0:
        return None
    return step_score(count, RATING_COUNT_STEPS, RATING_COUNT_TOP)


def score_installation_count(active_installs: float | None) -> float | None:
    """Score popularity by the number of active installations."""
    installs = clamp_count(active_installs)
    if installs <= 0:
        return None
    return step_score(installs, INSTALLATION_STEPS, INSTALLATION_TOP)


def score_support_responsiveness(
    support_threads: float | None,
    support_threads_resolved: float | None,
) -> float:
    """Score support quality from the share of resolved threads.

    Never absent: with no threads the neutral score is returned.
    Resolved threads are clamped to [0, support_threads].
    """
    threads = clamp_count(support_threads)
    if threads <= 0:
        return SUPPORT_NEUTRAL_SCORE
    resolved = clamp(clamp_count(support_threads_resolved), 0.0, threads)
    rate = resolved / threads
    return min(1.0, rate + SUPPORT_RESOLUTION_BONUS)


def score_usability_components(record: SignalRecord) -> dict[str, float | None]:
    """Score every usability component for one record.

    The support neutral default only fills in beside real data: a record
    whose signals are all absent or zero has no present component and
    scores the scale minimum.

    Returns:
        Mapping of component name to score, in UsabilityComponent order.
    """
    components: dict[str, float | None] = {
        UsabilityComponent.USER_RATING.value: score_user_rating(record.rating),
        UsabilityComponent.RATING_COUNT.value: score_rating_count(record.num_ratings),
        UsabilityComponent.INSTALLATION_COUNT.value: score_installation_count(
            record.active_installs
        ),
        UsabilityComponent.SUPPORT_RESPONSIVENESS.value: score_support_responsiveness(
            record.support_threads, record.support_threads_resolved
        ),
    }
    has_threads = clamp_count(record.support_threads) > 0
    if not has_threads and all(score is None for score in list(components.values())[:-1]):
        components[UsabilityComponent.SUPPORT_RESPONSIVENESS.value] = None
    return components


__all__ = [
    "INSTALLATION_STEPS",
    "RATING_COUNT_STEPS",
    "SUPPORT_NEUTRAL_SCORE",
    "clamp",
    "clamp_count",
    "score_installation_count",
    "score_rating_count",
    "score_support_responsiveness",
    "score_usability_components",
    "score_user_rating",
    "step_score",
]
