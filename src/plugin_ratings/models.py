"""Pydantic models for plugin rating inputs and outputs.

This module defines the component names, the signal record consumed by the
calculators, and the breakdown/explanation records they produce.

Signal records are built leniently: any value that cannot be read as a
finite number is treated as absent. Scoring never fails on malformed input.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field


class UsabilityComponent(str, Enum):
    """Components of the usability rating.

    Attributes:
        USER_RATING: Average end-user rating (0-5 stars).
        RATING_COUNT: Number of ratings (credibility of the average).
        INSTALLATION_COUNT: Active installations (popularity).
        SUPPORT_RESPONSIVENESS: Share of resolved support threads.
    """

    USER_RATING = "user_rating"
    RATING_COUNT = "rating_count"
    INSTALLATION_COUNT = "installation_count"
    SUPPORT_RESPONSIVENESS = "support_responsiveness"


class HealthComponent(str, Enum):
    """Components of the maintenance health score."""

    UPDATE_FREQUENCY = "update_frequency"
    WP_COMPATIBILITY = "wp_compatibility"
    SUPPORT_RESPONSE = "support_response"
    TIME_SINCE_UPDATE = "time_since_update"
    REPORTED_ISSUES = "reported_issues"


def _to_number(value: Any) -> float | None:
    """Read a finite or infinite number from a raw value, else None.

    Booleans, NaN and unparseable strings are treated as absent.
    """
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
    if math.isnan(number):
        return None
    return number


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    return None


def _to_distribution(value: Any) -> dict[int, float] | None:
    """Read a star-rating distribution ({stars: count}) from a raw mapping."""
    if not isinstance(value, Mapping):
        return None
    distribution: dict[int, float] = {}
    for stars, count in value.items():
        try:
            key = int(stars)
        except (TypeError, ValueError):
            continue
        number = _to_number(count)
        if number is not None:
            distribution[key] = max(0.0, number)
    return distribution


class SignalRecord(BaseModel):
    """Raw per-item signals supplied by the caller.

    Every field is optional. Zero and absent are treated identically by the
    usability components (except support responsiveness).

    Example:
        >>> record = SignalRecord.from_mapping({
        ...     "slug": "contact-form",
        ...     "rating": 4.5,
        ...     "num_ratings": "150",
        ...     "active_installs": 50000,
        ... })
        >>> record.num_ratings
        150.0
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    slug: str | None = None
    """Item identifier used as the batch result key."""

    rating: float | None = None
    """Average end-user rating on a 0-5 scale."""

    num_ratings: float | None = None
    active_installs: float | None = None
    support_threads: float | None = None
    support_threads_resolved: float | None = None

    version: str | None = None
    """Current release version string (health score)."""

    last_updated: datetime | date | str | None = None
    """Last release timestamp; unparseable strings are kept as-is."""

    tested: str | None = None
    """Highest platform version the item was tested with (health score)."""

    ratings: dict[int, float] | None = None
    """Star-rating distribution {1..5: count} (health score)."""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SignalRecord:
        """Build a record from an untrusted mapping without raising.

        Args:
            data: Raw signal mapping (e.g. decoded JSON from the transport).

        Returns:
            SignalRecord with unreadable values dropped to None.
        """
        last_updated = data.get("last_updated")
        if not isinstance(last_updated, (datetime, date)):
            last_updated = _to_text(last_updated)
        return cls(
            slug=_to_text(data.get("slug")),
            rating=_to_number(data.get("rating")),
            num_ratings=_to_number(data.get("num_ratings")),
            active_installs=_to_number(data.get("active_installs")),
            support_threads=_to_number(data.get("support_threads")),
            support_threads_resolved=_to_number(data.get("support_threads_resolved")),
            version=_to_text(data.get("version")),
            last_updated=last_updated,
            tested=_to_text(data.get("tested")),
            ratings=_to_distribution(data.get("ratings")),
        )


def coerce_record(record: SignalRecord | Mapping[str, Any]) -> SignalRecord:
    """Return ``record`` as a SignalRecord, converting mappings leniently."""
    if isinstance(record, SignalRecord):
        return record
    if isinstance(record, Mapping):
        return SignalRecord.from_mapping(record)
    return SignalRecord()


class CalculationBreakdown(BaseModel):
    """Traceable intermediate values of a single calculation.

    Example:
        >>> breakdown.components["user_rating"]
        0.9
        >>> breakdown.weighted_sum, breakdown.total_weight
        (84.5, 100)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    components: dict[str, float | None] = Field(
        ...,
        description="Per-component score in [0, 1], or None when absent",
    )

    weights: dict[str, int] = Field(..., description="Weight configuration used")

    weighted_sum: Annotated[float, Field(ge=0)]
    """Sum of weight * score over present components."""

    total_weight: Annotated[int, Field(ge=0)]
    """Sum of weights of present components."""

    normalized_score: Annotated[float, Field(ge=0, le=1.0)]
    """weighted_sum / total_weight, or 0 when nothing was present."""

    final_score: float
    """Score on the calculator's output scale."""

    @property
    def present_components(self) -> list[str]:
        """Names of the components that contributed to the score."""
        return [name for name, score in self.components.items() if score is not None]


class ComponentExplanation(BaseModel):
    """Human-facing description of one component."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str
    description: str
    weight: Annotated[int, Field(ge=0, le=100)]


class AlgorithmExplanation(BaseModel):
    """Static descriptive metadata about a scoring algorithm.

    Used for documentation only; carries no computational logic.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str
    description: str
    components: dict[str, ComponentExplanation]
    scale: str
    color_coding: dict[str, str] | None = None


__all__ = [
    "AlgorithmExplanation",
    "CalculationBreakdown",
    "ComponentExplanation",
    "HealthComponent",
    "SignalRecord",
    "UsabilityComponent",
    "coerce_record",
]
