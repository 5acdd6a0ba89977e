"""Dump and annotations commands - one-shot output without the TUI."""

from __future__ import annotations

import asyncio
from pathlib import Path  # noqa: TC003 - typer needs this at runtime for argument parsing
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

from jobtail.annotations import AnnotationFilter, filter_annotations
from jobtail.commands.common import (
    ApiUrl,
    JobId,
    LogFile,
    Proxy,
    Repo,
    Token,
    Verbose,
    make_source,
    setup_logging,
)
from jobtail.config import load_config
from jobtail.document import LogDocument
from jobtail.grouper import GroupExpansion
from jobtail.models import AnnotationLevel, StreamPhase
from jobtail.render import item_to_text, omitted_text
from jobtail.stream import StreamController
from jobtail.truncation import TruncationWindow

if TYPE_CHECKING:
    from jobtail.models import AppConfig
    from jobtail.sources import LogSource

_LEVEL_STYLES: dict[AnnotationLevel, str] = {
    AnnotationLevel.FAILURE: "red",
    AnnotationLevel.WARNING: "yellow",
    AnnotationLevel.NOTICE: "blue",
}


async def _load_once(source: LogSource, config: AppConfig) -> StreamController:
    controller = StreamController(source, stall_threshold=config.stall_threshold)
    try:
        await controller.poll()
    finally:
        await controller.aclose()
    return controller


def _fetch_document(source: LogSource, config: AppConfig) -> LogDocument:
    """Fetch the whole log from offset 0, exiting on failure."""
    controller = asyncio.run(_load_once(source, config))
    if controller.last_error is not None:
        typer.echo(f"Error: {controller.last_error}")
        raise typer.Exit(1)
    if controller.phase == StreamPhase.NOT_FOUND:
        typer.echo(f"Error: {controller.message or 'logs not found'}")
        raise typer.Exit(1)
    return LogDocument.from_text(controller.state.content)


def dump(
    repo: Repo,
    job_id: JobId,
    search: Annotated[str | None, typer.Option("--search", "-s", help="Highlight a search term")] = None,
    expand: Annotated[bool, typer.Option("--expand", "-e", help="Expand all groups")] = False,  # noqa: FBT002
    show_all: Annotated[bool, typer.Option("--all", help="Do not omit the middle of long logs")] = False,  # noqa: FBT002
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Export the log to a file instead")] = None,
    fmt: Annotated[str, typer.Option("--format", help="Export format: raw, plain")] = "raw",
    token: Token = None,
    proxy: Proxy = None,
    api_url: ApiUrl = None,
    log_file: LogFile = None,
    verbose: Verbose = False,  # noqa: FBT002
) -> None:
    """Print a job log with groups, colours and highlights, or export it."""
    setup_logging(log_file, verbose=verbose)
    config = load_config()
    source = make_source(repo, job_id, config, token=token, proxy=proxy, api_url=api_url)
    document = _fetch_document(source, config)

    if output is not None:
        from jobtail.export import ExportFormat, export_text  # noqa: PLC0415

        try:
            export_fmt = ExportFormat(fmt)
        except ValueError:
            typer.echo(f"Error: unknown format '{fmt}'. Use: raw, plain")
            raise typer.Exit(1)  # noqa: B904
        count = export_text(document.text, export_fmt, output)
        typer.echo(f"Exported {count} lines to {output}")
        return

    expansion = GroupExpansion()
    if expand:
        expansion.expand_all(document.groups)
    items = document.flatten(expansion)

    window = TruncationWindow(config.render_limit, config.head_lines, config.tail_lines)
    if show_all:
        window.show_everything()
    head, tail = window.slice(len(items)).take(items)

    console = Console(highlight=False)
    for item in head:
        console.print(item_to_text(item, search))
    if tail:
        console.print(omitted_text(len(items) - len(head) - len(tail), hint="use --all to show everything"))
        for item in tail:
            console.print(item_to_text(item, search))


def annotations(
    repo: Repo,
    job_id: JobId,
    level: Annotated[
        AnnotationFilter, typer.Option("--level", "-l", help="Only show one annotation level")
    ] = AnnotationFilter.ALL,
    token: Token = None,
    proxy: Proxy = None,
    api_url: ApiUrl = None,
    log_file: LogFile = None,
    verbose: Verbose = False,  # noqa: FBT002
) -> None:
    """List the annotations emitted in a job log."""
    setup_logging(log_file, verbose=verbose)
    config = load_config()
    source = make_source(repo, job_id, config, token=token, proxy=proxy, api_url=api_url)
    document = _fetch_document(source, config)

    found = filter_annotations(document.annotations, level)
    if not found:
        typer.echo("No annotations found")
        return

    table = Table(show_edge=False)
    table.add_column("Line", justify="right")
    table.add_column("Level", no_wrap=True)
    table.add_column("Location", no_wrap=True)
    table.add_column("Title")
    table.add_column("Message", overflow="fold")
    for annotation in found:
        location = annotation.path or ""
        if location and annotation.start_line is not None:
            location += f":{annotation.start_line}"
        table.add_row(
            str(annotation.line + 1),
            annotation.annotation_level.value,
            location,
            annotation.title if annotation.title and annotation.title != annotation.message else "",
            annotation.message,
            style=_LEVEL_STYLES[annotation.annotation_level],
        )
    Console().print(table)
