"""Watch and view commands - follow a job log in a TUI."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - typer needs this at runtime for argument parsing
from typing import TYPE_CHECKING, Annotated

import typer

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
from jobtail.models import JobStatus
from jobtail.sources import FileLogSource
from jobtail.stream import StreamController

if TYPE_CHECKING:
    from jobtail.models import AppConfig


def _run_app(controller: StreamController, config: AppConfig, *, follow: bool) -> None:
    from jobtail.app import JobLogApp  # noqa: PLC0415

    log_app = JobLogApp(controller, config=config, follow=follow)
    log_app.run(mouse=False)


def watch(
    repo: Repo,
    job_id: JobId,
    status: Annotated[
        JobStatus | None, typer.Option("--status", help="Known job status (default: ask the source)")
    ] = None,
    token: Token = None,
    proxy: Proxy = None,
    api_url: ApiUrl = None,
    log_file: LogFile = None,
    verbose: Verbose = False,  # noqa: FBT002
) -> None:
    """Follow a CI job log live in a terminal UI."""
    setup_logging(log_file, verbose=verbose)
    config = load_config()
    source = make_source(repo, job_id, config, token=token, proxy=proxy, api_url=api_url)
    controller = StreamController(
        source,
        poll_interval=config.poll_interval,
        stall_threshold=config.stall_threshold,
        job_status=status,
    )
    _run_app(controller, config, follow=controller.job_active)


def view(
    file: Annotated[Path, typer.Argument(help="Saved job log file")],
    tail: Annotated[bool, typer.Option("--tail", "-t", help="Follow the file as it grows")] = False,  # noqa: FBT002
    log_file: LogFile = None,
    verbose: Verbose = False,  # noqa: FBT002
) -> None:
    """View a saved job log file in a terminal UI."""
    if not tail and not file.is_file():
        typer.echo(f"Error: {file} is not a file")
        raise typer.Exit(1)

    setup_logging(log_file, verbose=verbose)
    config = load_config()
    controller = StreamController(
        FileLogSource(file, complete=not tail),
        poll_interval=config.poll_interval,
        stall_threshold=config.stall_threshold,
        job_status=None if tail else JobStatus.COMPLETED,
    )
    _run_app(controller, config, follow=tail)
