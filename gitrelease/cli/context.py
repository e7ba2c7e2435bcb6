from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from gitrelease.core.config import CONFIG_FILENAME, Config, load_config
from gitrelease.core.errors import ErrorCode
from gitrelease.core.result import Err
from gitrelease.git.repository import Repository
from gitrelease.output.console import ConsoleProtocol, RichConsole

REPO_ENV_VAR = "GITRELEASE_REPO"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    repo: Repository
    config: Config
    config_path: Path
    console: ConsoleProtocol


def resolve_root() -> Path:
    """Repository root: ``GITRELEASE_REPO`` (set by ``--repo``) or the cwd."""
    env_value = os.environ.get(REPO_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser().resolve()
    return Path.cwd()


def build_context(*, load_config_file: bool = True) -> CLIContext:
    """Resolve the repository and load its configuration.

    ``load_config_file=False`` skips reading ``.gitrelease.json`` and uses the
    defaults, for commands that rewrite the file and must work even when it
    is broken.
    """
    root = resolve_root()
    repo = Repository(root)
    if not repo.exists():
        typer.echo(f"error: not a git repository: {root}", err=True)
        typer.echo("hint: run from the repository root or pass --repo", err=True)
        raise typer.Exit(code=int(ErrorCode.PRECONDITION_ERROR))

    config_path = root / CONFIG_FILENAME
    config = Config()
    if load_config_file:
        config_result = load_config(config_path)
        if isinstance(config_result, Err):
            typer.echo(f"error: {config_path}: {config_result.error.message}", err=True)
            typer.echo("hint: fix the file or run 'gitrelease init --force'", err=True)
            raise typer.Exit(code=int(ErrorCode.IO_ERROR))
        config = config_result.value

    return CLIContext(
        root=root,
        repo=repo,
        config=config,
        config_path=config_path,
        console=RichConsole(),
    )
