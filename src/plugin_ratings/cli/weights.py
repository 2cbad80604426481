"""Weights command group: inspect and change stored weight configurations."""

from __future__ import annotations

import json

import click

from plugin_ratings._base import _WeightedCalculator
from plugin_ratings.cli.utils import ExitCode, error_exit, get_settings, success
from plugin_ratings.config import build_health_calculator, build_usability_calculator
from plugin_ratings.errors import (
    MissingComponentError,
    WeightPersistenceError,
    WeightValidationError,
)

_health_option = click.option(
    "--health",
    is_flag=True,
    default=False,
    help="Operate on the health score weights instead of the usability weights.",
)


def _calculator(ctx: click.Context, health: bool) -> _WeightedCalculator:
    settings = get_settings(ctx)
    if health:
        return build_health_calculator(settings)
    return build_usability_calculator(settings)


def _format_weights(weights: dict[str, int]) -> str:
    return "\n".join(f"{name:<24} {weight:>3}" for name, weight in weights.items())


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse ``component=weight`` arguments."""
    parsed: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            error_exit(
                "Expected component=weight",
                exit_code=ExitCode.USAGE_ERROR,
                argument=pair,
            )
        parsed[name.strip()] = value.strip()
    return parsed


@click.group(name="weights", help="Show, set or reset algorithm weights.")
def weights() -> None:
    """Weight configuration command group."""


@weights.command(name="show")
@_health_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print as JSON.")
@click.pass_context
def show(ctx: click.Context, health: bool, as_json: bool) -> None:
    """Print the current weights."""
    current = _calculator(ctx, health).get_weights()
    success(json.dumps(current, indent=2) if as_json else _format_weights(current))


@weights.command(name="set")
@_health_option
@click.argument("pairs", nargs=-1, required=True)
@click.pass_context
def set_weights(ctx: click.Context, health: bool, pairs: tuple[str, ...]) -> None:
    """Validate, store and apply new weights.

    PAIRS are component=weight arguments covering every component; the
    weights must be integers between 0 and 100 summing to 100.
    """
    candidate = _parse_pairs(pairs)
    calculator = _calculator(ctx, health)
    try:
        applied = calculator.update_weights(candidate)
    except MissingComponentError as e:
        error_exit(
            e.message,
            exit_code=ExitCode.VALIDATION_ERROR,
            kind=e.code,
            expected=",".join(calculator.components),
        )
    except WeightValidationError as e:
        error_exit(
            e.message,
            exit_code=ExitCode.VALIDATION_ERROR,
            kind=e.code,
            component=e.component,
        )
    except WeightPersistenceError as e:
        error_exit(str(e), exit_code=ExitCode.GENERAL_ERROR)
    success(_format_weights(applied))


@weights.command(name="reset")
@_health_option
@click.pass_context
def reset(ctx: click.Context, health: bool) -> None:
    """Store and apply the default weights."""
    try:
        applied = _calculator(ctx, health).reset_weights_to_default()
    except WeightPersistenceError as e:
        error_exit(str(e), exit_code=ExitCode.GENERAL_ERROR)
    success(_format_weights(applied))
