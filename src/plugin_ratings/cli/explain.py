"""Explain command: describe a scoring algorithm and its current weights."""

from __future__ import annotations

import json

import click

from plugin_ratings.cli.utils import get_settings, success
from plugin_ratings.config import build_health_calculator, build_usability_calculator
from plugin_ratings.models import AlgorithmExplanation


def _format_text(explanation: AlgorithmExplanation) -> str:
    lines = [explanation.title, "=" * len(explanation.title), explanation.description, ""]
    for name, component in explanation.components.items():
        lines.append(f"{component.label} ({name}, weight {component.weight})")
        lines.append(f"    {component.description}")
    lines.append("")
    lines.append(explanation.scale)
    if explanation.color_coding:
        for color, meaning in explanation.color_coding.items():
            lines.append(f"    {color:<12} {meaning}")
    return "\n".join(lines)


@click.command(name="explain")
@click.option(
    "--health",
    is_flag=True,
    default=False,
    help="Explain the health score instead of the usability rating.",
)
@click.option(
    "--output",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.pass_context
def explain(ctx: click.Context, health: bool, output_format: str) -> None:
    """Print how the rating is computed."""
    settings = get_settings(ctx)
    calculator = build_health_calculator(settings) if health else build_usability_calculator(settings)
    explanation = calculator.get_algorithm_explanation()

    if output_format.lower() == "json":
        success(json.dumps(explanation.model_dump(mode="json"), indent=2))
    else:
        success(_format_text(explanation))
