"""Options and helpers shared by the job commands."""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003 - typer needs this at runtime for argument parsing
from typing import TYPE_CHECKING, Annotated

import typer

from jobtail.sources import GitHubLogSource, ProxyLogSource

if TYPE_CHECKING:
    from jobtail.models import AppConfig
    from jobtail.sources import LogSource

Repo = Annotated[str, typer.Argument(help="Repository as OWNER/REPO")]
JobId = Annotated[int, typer.Argument(help="Job ID")]
Token = Annotated[str | None, typer.Option("--token", help="GitHub token", envvar="GITHUB_TOKEN")]
Proxy = Annotated[
    str | None,
    typer.Option("--proxy", help="Base URL of a web app serving /api/repos/.../actions/jobs/ID?offset=N"),
]
ApiUrl = Annotated[str | None, typer.Option("--api-url", help="GitHub API URL (default from config)")]
LogFile = Annotated[Path | None, typer.Option("--log-file", help="Write debug logs to this file")]
Verbose = Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG instead of INFO")]


def setup_logging(log_file: Path | None, *, verbose: bool = False) -> None:
    """Send log records to a file; without one nothing is logged (the TUI owns the terminal)."""
    if log_file is None:
        logging.getLogger("jobtail").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def split_repo(repo: str) -> tuple[str, str]:
    """Split OWNER/REPO, exiting with an error for anything else."""
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        typer.echo(f"Error: expected OWNER/REPO, got '{repo}'")
        raise typer.Exit(1)
    return owner, name


def make_source(
    repo: str,
    job_id: int,
    config: AppConfig,
    *,
    token: str | None = None,
    proxy: str | None = None,
    api_url: str | None = None,
) -> LogSource:
    """Pick the proxy route when one is configured, otherwise talk to GitHub directly."""
    owner, name = split_repo(repo)
    base = proxy or config.proxy_url
    if base:
        return ProxyLogSource(base, owner, name, job_id)
    return GitHubLogSource(owner, name, job_id, token=token, api_url=api_url or config.api_url)
