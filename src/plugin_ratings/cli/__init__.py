"""Command-line interface for plugin-ratings.

Commands:
    plugin-ratings score: Score plugin records from a JSON or YAML file
    plugin-ratings weights: Show, set or reset stored weights
    plugin-ratings explain: Describe a scoring algorithm

Example:
    $ plugin-ratings score plugins.yaml --output json
    $ plugin-ratings weights set user_rating=50 rating_count=15 \\
        installation_count=20 support_responsiveness=15

Exit Codes:
    0: Success
    1: General error
    2: Usage error (invalid arguments)
    3: File not found
    5: Validation error
"""

from __future__ import annotations

from plugin_ratings.cli.main import cli, main

__all__ = ["cli", "main"]
