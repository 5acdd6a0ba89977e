"""CLI entry point for jobtail."""

from __future__ import annotations

import typer

from jobtail.commands.dump import annotations, dump
from jobtail.commands.watch import view, watch

app = typer.Typer(add_completion=False, help="Stream and browse CI job logs.")
app.command()(watch)
app.command()(view)
app.command()(dump)
app.command()(annotations)


def main() -> None:
    """Entry point for the CLI."""
    app()
