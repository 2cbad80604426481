"""Main entry point for the plugin-ratings CLI.

Settings come from ``PLUGIN_RATINGS_*`` environment variables and may be
overridden by root options:

Example:
    $ plugin-ratings --settings ratings.yaml weights show --health
    $ plugin-ratings --platform-version 6.5 score plugins.json --breakdown
"""

from __future__ import annotations

import sys
from importlib.metadata import version as get_version
from pathlib import Path

import click
from pydantic import ValidationError

from plugin_ratings.cli.explain import explain
from plugin_ratings.cli.score import score
from plugin_ratings.cli.utils import ExitCode, error_exit
from plugin_ratings.cli.weights import weights
from plugin_ratings.config import RatingsSettings
from plugin_ratings.telemetry import configure_logging


def _get_version() -> str:
    """Get the plugin-ratings package version, or 'unknown' if not installed."""
    try:
        return get_version("plugin-ratings")
    except Exception:
        return "unknown"


@click.group(
    name="plugin-ratings",
    help="plugin-ratings - Weighted usability and health scoring for plugins.",
    epilog="Use 'plugin-ratings <command> --help' for command-specific help.",
    context_settings={
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(
    version=_get_version(),
    prog_name="plugin-ratings",
    message="%(prog)s %(version)s",
)
@click.option(
    "--settings",
    "settings_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings document holding the weights (default: in memory).",
)
@click.option(
    "--platform-version",
    type=str,
    default=None,
    help="Current platform version for compatibility scoring.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Minimum log level written to stderr.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    settings_file: Path | None,
    platform_version: str | None,
    log_level: str | None,
) -> None:
    """Root command group: resolve settings and configure logging."""
    ctx.ensure_object(dict)

    overrides: dict[str, object] = {}
    if settings_file is not None:
        overrides["weights_file"] = settings_file
    if platform_version is not None:
        overrides["platform_version"] = platform_version
    if log_level is not None:
        overrides["log_level"] = log_level.upper()

    try:
        settings = RatingsSettings.from_env()
        if overrides:
            settings = RatingsSettings(**{**settings.model_dump(), **overrides})
    except ValidationError as e:
        error_exit(
            f"Invalid settings: {e.errors()[0]['msg']}",
            exit_code=ExitCode.USAGE_ERROR,
            field=".".join(str(loc) for loc in e.errors()[0]["loc"]),
        )

    configure_logging(settings.log_level, json_output=settings.json_logs)
    ctx.obj["settings"] = settings


cli.add_command(score)
cli.add_command(weights)
cli.add_command(explain)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the plugin-ratings CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(ExitCode.GENERAL_ERROR)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
