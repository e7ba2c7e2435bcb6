from __future__ import annotations

import logging
import os
from pathlib import Path

import typer

from gitrelease import __version__
from gitrelease.cli.commands.branch_cmd import branch, hotfix, rollback_cmd
from gitrelease.cli.commands.config_cmd import config_app, init
from gitrelease.cli.commands.release_cmd import (
    finalize,
    list_cmd,
    next_version_cmd,
    notes,
    prepare,
)
from gitrelease.cli.commands.verify_cmd import stage, verify
from gitrelease.cli.context import REPO_ENV_VAR
from gitrelease.core.errors import ErrorCode

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release management on top of git: versions, notes, branches and tags.",
)


# Commands
app.command()(init)
app.command()(prepare)
app.command()(finalize)
app.command("next-version")(next_version_cmd)
app.command("list")(list_cmd)
app.command()(notes)
app.command()(branch)
app.command()(verify)
app.command("rollback")(rollback_cmd)
app.command()(hotfix)
app.command()(stage)

# Sub-apps
app.add_typer(config_app, name="config")


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository root (default: current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git commands."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if repo is not None:
        try:
            root = repo.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --repo: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --repo '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        os.environ[REPO_ENV_VAR] = str(root)


def main() -> None:
    app()
