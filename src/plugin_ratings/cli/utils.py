"""CLI utility functions and error handling.

Errors and warnings go to stderr as plain text with a non-zero exit code;
command results go to stdout.

Example:
    from plugin_ratings.cli.utils import error_exit, ExitCode

    if not path.exists():
        error_exit("File not found", exit_code=ExitCode.FILE_NOT_FOUND, path=str(path))
"""

from __future__ import annotations

import sys
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn

    from plugin_ratings.config import RatingsSettings


class ExitCode(IntEnum):
    """Standard exit codes for CLI commands."""

    SUCCESS = 0
    """Command completed successfully."""

    GENERAL_ERROR = 1
    """General error (catch-all, including failed weight persistence)."""

    USAGE_ERROR = 2
    """Invalid usage (bad arguments, malformed component=weight pairs)."""

    FILE_NOT_FOUND = 3
    """Required file not found."""

    VALIDATION_ERROR = 5
    """Input validation failed (rejected weights, unreadable record file)."""


def _with_context(prefix: str, message: str, context: dict[str, str | int | bool | None]) -> str:
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    if context_str:
        return f"{prefix}: {message} ({context_str})"
    return f"{prefix}: {message}"


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Example:
        error("Weights rejected", kind="invalid_total")
        # Output: Error: Weights rejected (kind=invalid_total)
    """
    click.echo(_with_context("Error", message, context), err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.GENERAL_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit with a code.

    Raises:
        SystemExit: Always exits with the specified code.
    """
    error(message, **context)
    sys.exit(exit_code)


def warn(message: str, **context: str | int | bool | None) -> None:
    """Print a warning message to stderr."""
    click.echo(_with_context("Warning", message, context), err=True)


def success(message: str) -> None:
    """Print a result message to stdout."""
    click.echo(message)


def validate_file_exists(path: Path, description: str = "File") -> None:
    """Validate that a file exists.

    Raises:
        SystemExit: FILE_NOT_FOUND when missing, VALIDATION_ERROR when not a file.
    """
    if not path.exists():
        error_exit(
            f"{description} not found",
            exit_code=ExitCode.FILE_NOT_FOUND,
            path=str(path),
        )
    if not path.is_file():
        error_exit(
            f"{description} is not a file",
            exit_code=ExitCode.VALIDATION_ERROR,
            path=str(path),
        )


def get_settings(ctx: click.Context) -> RatingsSettings:
    """Return the settings resolved by the root command group."""
    return ctx.find_root().obj["settings"]


__all__ = [
    "ExitCode",
    "error",
    "error_exit",
    "get_settings",
    "success",
    "validate_file_exists",
    "warn",
]
