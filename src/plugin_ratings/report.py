"""Combined per-item rating report.

Bundles the usability rating and the health score of one item with both
calculation breakdowns, for detail views and the CLI.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from plugin_ratings._base import RecordInput
from plugin_ratings.calculator import UsabilityRatingCalculator
from plugin_ratings.health import HealthScoreCalculator, health_color, health_description
from plugin_ratings.models import CalculationBreakdown, coerce_record


class PluginRatingReport(BaseModel):
    """Usability and health results for a single item."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    slug: str | None = None
    usability_rating: Annotated[float, Field(ge=1.0, le=5.0)]
    health_score: Annotated[int, Field(ge=0, le=100)]
    health_color: str
    health_description: str
    usability_breakdown: CalculationBreakdown
    health_breakdown: CalculationBreakdown


def rate_plugin(
    record: RecordInput,
    usability: UsabilityRatingCalculator,
    health: HealthScoreCalculator,
) -> PluginRatingReport:
    """Score one item with both calculators.

    Args:
        record: SignalRecord or raw signal mapping.
        usability: Usability rating calculator.
        health: Health score calculator.

    Returns:
        PluginRatingReport for the item.
    """
    signals = coerce_record(record)
    usability_breakdown = usability.calculate_breakdown(signals)
    health_breakdown = health.calculate_breakdown(signals)
    score = int(health_breakdown.final_score)

    return PluginRatingReport(
        slug=signals.slug,
        usability_rating=usability_breakdown.final_score,
        health_score=score,
        health_color=health_color(score),
        health_description=health_description(score),
        usability_breakdown=usability_breakdown,
        health_breakdown=health_breakdown,
    )


__all__ = ["PluginRatingReport", "rate_plugin"]
