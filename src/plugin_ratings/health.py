"""Maintenance health score calculator.

The health score (integer 0-100) complements the usability rating with
maintenance indicators: release cadence, platform compatibility, support
engagement, release recency and low-rating share. It uses the same weight
configuration machinery as the usability rating under its own storage key.

Time and the current platform version are injected so the score is
deterministic under test.

Example:
    >>> calculator = HealthScoreCalculator(
    ...     platform_version="6.4",
    ...     clock=lambda: datetime(2024, 3, 1, tzinfo=timezone.utc),
    ... )
    >>> score = calculator.calculate({"version": "2.1.7", "last_updated": "2024-02-20"})
    >>> health_color(score)
    'green'
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from typing import Any, ClassVar

from plugin_ratings._base import (
    BatchInput,
    RecordInput,
    _WeightedCalculator,
    combine_weighted,
)
from plugin_ratings.components import clamp, clamp_count
from plugin_ratings.models import (
    AlgorithmExplanation,
    CalculationBreakdown,
    ComponentExplanation,
    HealthComponent,
    SignalRecord,
)
from plugin_ratings.store import WeightStore
from plugin_ratings.telemetry import traced
from plugin_ratings.weights import DEFAULT_HEALTH_WEIGHTS

Clock = Callable[[], datetime]

DEFAULT_PLATFORM_VERSION = "6.4"
UNKNOWN_AGE_DAYS = 9999
"""Age assigned to release dates that cannot be parsed."""

NEUTRAL_SUPPORT_SCORE = 0.6
NEUTRAL_ISSUES_SCORE = 0.6

# (max_days_inclusive, value) tables
RECENCY_FACTORS: tuple[tuple[int, float], ...] = ((30, 1.0), (90, 0.9), (180, 0.7))
RECENCY_FACTOR_FLOOR = 0.5

RECENCY_SCORES: tuple[tuple[int, float], ...] = (
    (30, 1.0),
    (90, 0.9),
    (180, 0.8),
    (365, 0.6),
    (730, 0.4),
)
RECENCY_SCORE_FLOOR = 0.2

_DATE_FORMATS = (
    "%Y-%m-%d %I:%M%p",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)
_TRAILING_ZONE = re.compile(r"\s+(GMT|UTC|Z)$", re.IGNORECASE)
_ZULU_SUFFIX = re.compile(r"(?<=\d)Z$", re.IGNORECASE)
_LEADING_DIGITS = re.compile(r"^\s*(\d+)")

_COMPONENT_TEXT: dict[str, tuple[str, str]] = {
    HealthComponent.UPDATE_FREQUENCY.value: (
        "Update Frequency",
        "How regularly the plugin is updated and maintained",
    ),
    HealthComponent.WP_COMPATIBILITY.value: (
        "Platform Compatibility",
        "Compatibility with current platform versions",
    ),
    HealthComponent.SUPPORT_RESPONSE.value: (
        "Support Response",
        "Developer responsiveness to support requests",
    ),
    HealthComponent.TIME_SINCE_UPDATE.value: (
        "Update Recency",
        "How recently the plugin was last updated",
    ),
    HealthComponent.REPORTED_ISSUES.value: (
        "Issue Indicators",
        "Indicators of potential issues from user feedback",
    ),
}

# (min_score_inclusive, color, description), best band first
HEALTH_BANDS: tuple[tuple[int, str, str], ...] = (
    (86, "green", "Excellent - Well maintained and actively supported"),
    (71, "light-green", "Good - Regularly maintained with good support"),
    (41, "orange", "Fair - Occasionally maintained, some concerns"),
    (0, "red", "Poor - Infrequently maintained, potential issues"),
)

COLOR_CODING: dict[str, str] = {
    "green": "Excellent (86-100)",
    "light-green": "Good (71-85)",
    "orange": "Fair (41-70)",
    "red": "Poor (0-40)",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Parsing helpers
# =============================================================================


def _leading_int(text: str | None) -> int:
    """Integer prefix of a version segment ("7-beta" -> 7), 0 when none."""
    if not text:
        return 0
    match = _LEADING_DIGITS.match(text)
    return int(match.group(1)) if match else 0


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_release_date(value: datetime | date | str | None) -> datetime | None:
    """Parse a release timestamp into an aware UTC datetime.

    Accepts datetime and date objects, ISO 8601 strings and the
    ``2024-01-15 3:45pm GMT`` form used by plugin directories. Naive values
    are taken as UTC.

    Returns:
        Parsed datetime, or None when the value cannot be read.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    text = value.strip()
    try:
        return _as_utc(datetime.fromisoformat(_ZULU_SUFFIX.sub("+00:00", text)))
    except ValueError:
        pass

    text = _TRAILING_ZONE.sub("", text)
    for fmt in _DATE_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def days_since(value: datetime | date | str | None, now: datetime) -> int:
    """Whole days elapsed since ``value``; UNKNOWN_AGE_DAYS when unparseable."""
    released = parse_release_date(value)
    if released is None:
        return UNKNOWN_AGE_DAYS
    elapsed = (_as_utc(now) - released).total_seconds() / 86400
    return max(0, int(elapsed))


def _lookup(days: int, table: tuple[tuple[int, float], ...], floor: float) -> float:
    for max_days, value in table:
        if days <= max_days:
            return value
    return floor


# =============================================================================
# Component scoring
# =============================================================================


def score_update_frequency(record: SignalRecord, now: datetime) -> float | None:
    """Score release cadence from the version shape and release recency."""
    if record.version is None or record.last_updated is None:
        return None

    parts = record.version.split(".")
    if len(parts) >= 3:
        score = 0.8
    elif len(parts) == 2:
        score = 0.6
    else:
        score = 0.4

    if len(parts) >= 3 and _leading_int(parts[2]) > 5:
        score += 0.1

    factor = _lookup(days_since(record.last_updated, now), RECENCY_FACTORS, RECENCY_FACTOR_FLOOR)
    return min(1.0, score * factor)


def score_compatibility(tested: str | None, platform_version: str) -> float | None:
    """Score how close the tested-up-to version is to the current platform."""
    if tested is None:
        return None

    tested_parts = tested.split(".")
    current_parts = platform_version.split(".")
    tested_major = _leading_int(tested_parts[0])
    tested_minor = _leading_int(tested_parts[1]) if len(tested_parts) > 1 else 0
    current_major = _leading_int(current_parts[0])
    current_minor = _leading_int(current_parts[1]) if len(current_parts) > 1 else 0

    if tested_major > current_major:
        return 1.0
    if tested_major < current_major:
        return 0.4

    behind = current_minor - tested_minor
    if behind <= 0:
        return 1.0
    if behind == 1:
        return 0.9
    if behind == 2:
        return 0.8
    return 0.6


def score_support_response(threads: float | None, resolved: float | None) -> float | None:
    """Score support engagement; both thread counts must be present."""
    if threads is None or resolved is None:
        return None

    total = int(clamp_count(threads))
    if total == 0:
        return NEUTRAL_SUPPORT_SCORE
    closed = int(clamp(clamp_count(resolved), 0, total))

    score = closed / total
    if total >= 10:
        score += 0.1
    if total - closed > 20:
        score -= 0.1
    return clamp(score, 0.0, 1.0)


def score_time_since_update(record: SignalRecord, now: datetime) -> float | None:
    if record.last_updated is None:
        return None
    return _lookup(days_since(record.last_updated, now), RECENCY_SCORES, RECENCY_SCORE_FLOOR)


def score_reported_issues(distribution: Mapping[int, float] | None) -> float:
    """Score the share of 1 and 2 star ratings; neutral without ratings."""
    if not distribution:
        return NEUTRAL_ISSUES_SCORE
    total = sum(distribution.values())
    if total <= 0:
        return NEUTRAL_ISSUES_SCORE

    low = distribution.get(1, 0.0) + distribution.get(2, 0.0)
    score = 1.0 - (low / total) * 1.5
    if low > 50:
        score -= 0.1
    return clamp(score, 0.0, 1.0)


# =============================================================================
# Presentation
# =============================================================================


def _band(score: float) -> tuple[int, str, str]:
    for band in HEALTH_BANDS:
        if score >= band[0]:
            return band
    return HEALTH_BANDS[-1]


def health_color(score: float) -> str:
    """Color band of a health score: green, light-green, orange or red."""
    return _band(score)[1]


def health_description(score: float) -> str:
    return _band(score)[2]


# =============================================================================
# Calculator
# =============================================================================


class HealthScoreCalculator(_WeightedCalculator):
    """Weighted maintenance health score engine.

    Args:
        store: Configuration store. Defaults to an in-memory store.
        key: Storage key. Defaults to ``health_weights``.
        platform_version: Current platform release compared against each
            item's tested-up-to version.
        clock: Callable returning the current time.
    """

    storage_key: ClassVar[str] = "health_weights"
    default_weights: ClassVar[Mapping[str, int]] = DEFAULT_HEALTH_WEIGHTS

    def __init__(
        self,
        store: WeightStore | None = None,
        *,
        key: str | None = None,
        platform_version: str = DEFAULT_PLATFORM_VERSION,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(store, key=key)
        self.platform_version = platform_version
        self._clock = clock or _utc_now

    def score_components(self, record: SignalRecord) -> dict[str, float | None]:
        now = self._clock()
        return {
            HealthComponent.UPDATE_FREQUENCY.value: score_update_frequency(record, now),
            HealthComponent.WP_COMPATIBILITY.value: score_compatibility(
                record.tested, self.platform_version
            ),
            HealthComponent.SUPPORT_RESPONSE.value: score_support_response(
                record.support_threads, record.support_threads_resolved
            ),
            HealthComponent.TIME_SINCE_UPDATE.value: score_time_since_update(record, now),
            HealthComponent.REPORTED_ISSUES.value: score_reported_issues(record.ratings),
        }

    def _evaluate(
        self,
        record: SignalRecord,
        weights: Mapping[str, int],
    ) -> CalculationBreakdown:
        components = self.score_components(record)
        weighted_sum, total_weight, normalized = combine_weighted(components, weights)
        final = int(round(clamp(normalized * 100, 0.0, 100.0))) if total_weight else 0
        return CalculationBreakdown(
            components=components,
            weights=dict(weights),
            weighted_sum=weighted_sum,
            total_weight=total_weight,
            normalized_score=normalized,
            final_score=final,
        )

    @traced(operation_name="ratings.health.calculate")
    def calculate(self, record: RecordInput) -> int:
        """Calculate the health score (0-100) of one item."""
        return int(self._calculate(record).final_score)

    @traced(operation_name="ratings.health.calculate_batch")
    def calculate_batch(
        self,
        records: BatchInput,
        max_workers: int | None = None,
    ) -> dict[Any, int]:
        """Calculate health scores for many items, keyed by item id."""
        breakdowns = self._calculate_batch(records, max_workers=max_workers)
        return {item_id: int(breakdown.final_score) for item_id, breakdown in breakdowns.items()}

    def get_algorithm_explanation(self) -> AlgorithmExplanation:
        weights = self._config.current
        return AlgorithmExplanation(
            title="Health Score Algorithm",
            description=(
                "The health score evaluates plugin maintenance quality and "
                "reliability indicators."
            ),
            components={
                name: ComponentExplanation(label=label, description=description, weight=weights[name])
                for name, (label, description) in _COMPONENT_TEXT.items()
            },
            scale="Final score ranges from 0 to 100 (higher is better)",
            color_coding=dict(COLOR_CODING),
        )


__all__ = [
    "COLOR_CODING",
    "DEFAULT_PLATFORM_VERSION",
    "HealthScoreCalculator",
    "UNKNOWN_AGE_DAYS",
    "days_since",
    "health_color",
    "health_description",
    "parse_release_date",
    "score_compatibility",
    "score_reported_issues",
    "score_support_response",
]
