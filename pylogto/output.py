"""Output formatting for CLI commands."""

import json
from typing import Any

import click


class OutputFormatter:
    """Prints human readable or JSON output for the CLI.

    Informational output is suppressed in quiet and JSON mode; warnings and
    errors always go to stderr.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        self.json_output = json_output
        self.quiet = quiet

    @property
    def _silent(self) -> bool:
        return self.quiet or self.json_output

    def print(self, message: str = "") -> None:
        if not self._silent:
            click.echo(message)

    def info(self, message: str) -> None:
        if not self._silent:
            click.echo(message)

    def success(self, message: str) -> None:
        if not self._silent:
            click.secho(message, fg="green")

    def warning(self, message: str) -> None:
        click.secho(message, fg="yellow", err=True)

    def error(self, message: str) -> None:
        click.secho(f"Error: {message}", fg="red", err=True)

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON to stdout."""
        click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))
