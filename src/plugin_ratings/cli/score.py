"""Score command: rate plugin records from a file.

The file is JSON or YAML holding either a list of records carrying a
``slug`` or a mapping of item id to record.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import structlog
import yaml

from plugin_ratings._base import batch_items
from plugin_ratings.cli.utils import ExitCode, error_exit, get_settings, validate_file_exists, warn
from plugin_ratings.config import build_health_calculator, build_store, build_usability_calculator
from plugin_ratings.report import PluginRatingReport, rate_plugin

logger = structlog.get_logger(__name__)


def _load_records(path: Path) -> Any:
    """Load a record document; JSON is read as the YAML subset it is."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        error_exit(
            f"Cannot parse record file: {e}",
            exit_code=ExitCode.VALIDATION_ERROR,
            path=str(path),
        )
    if not isinstance(data, (list, dict)):
        error_exit(
            "Record file must hold a list of records or a mapping of id to record",
            exit_code=ExitCode.VALIDATION_ERROR,
            path=str(path),
        )
    return data


def _format_text(reports: list[tuple[Any, PluginRatingReport]], breakdown: bool) -> str:
    lines = [f"{'Plugin':<32} {'Rating':>6} {'Health':>6}  Status"]
    lines.append("-" * 64)
    for item_id, report in reports:
        lines.append(
            f"{str(item_id):<32} {report.usability_rating:>6.2f} "
            f"{report.health_score:>6}  {report.health_color}"
        )
        if breakdown:
            for title, detail in (
                ("usability", report.usability_breakdown),
                ("health", report.health_breakdown),
            ):
                lines.append(f"    {title}:")
                for name, value in detail.components.items():
                    shown = "n/a" if value is None else f"{value:.2f}"
                    lines.append(f"      {name:<24} {shown:>5}  weight {detail.weights[name]}")
    return "\n".join(lines)


def _format_json(reports: list[tuple[Any, PluginRatingReport]], breakdown: bool) -> str:
    exclude = None if breakdown else {"usability_breakdown", "health_breakdown"}
    payload = [
        {"id": item_id, **report.model_dump(mode="json", exclude=exclude)}
        for item_id, report in reports
    ]
    return json.dumps(payload, indent=2, default=str)


@click.command(name="score")
@click.argument("records_file", type=click.Path(path_type=Path))
@click.option(
    "--output",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--breakdown",
    is_flag=True,
    default=False,
    help="Include per-component scores and weights.",
)
@click.pass_context
def score(
    ctx: click.Context,
    records_file: Path,
    output_format: str,
    breakdown: bool,
) -> None:
    """Print usability rating, health score and status for each record.

    RECORDS_FILE is a JSON or YAML file of plugin signal records.
    """
    validate_file_exists(records_file, "Record file")
    data = _load_records(records_file)

    settings = get_settings(ctx)
    store = build_store(settings)
    usability = build_usability_calculator(settings, store)
    health = build_health_calculator(settings, store)

    items = batch_items(data)
    if not items:
        warn("No scorable records found", path=str(records_file))

    reports = [(item_id, rate_plugin(record, usability, health)) for item_id, record in items]
    logger.debug("records_scored", path=str(records_file), items=len(reports))

    if output_format.lower() == "json":
        click.echo(_format_json(reports, breakdown))
    else:
        click.echo(_format_text(reports, breakdown))
