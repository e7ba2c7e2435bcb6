from __future__ import annotations

import json

import typer

from gitrelease.cli.commands._helpers import exit_on_error, exit_with_code
from gitrelease.cli.context import build_context
from gitrelease.core.config import init_config, update_config
from gitrelease.core.errors import ErrorCode
from gitrelease.output.console import Style
from gitrelease.release.service import repository_identity

config_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Show or change the repository configuration.",
)


def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Initialize repository configuration."""
    ctx = build_context(load_config_file=False)
    if ctx.config_path.exists() and not force:
        ctx.console.error(f"config already exists: {ctx.config_path}")
        ctx.console.print("hint: pass --force to overwrite it", Style.DIM)
        exit_with_code(ErrorCode.USER_ERROR)

    identity = repository_identity(ctx.repo)
    config = exit_on_error(
        init_config(ctx.config_path, {"repository": identity}),
        ctx,
        error_code=ErrorCode.IO_ERROR,
    )

    ctx.console.success("repository configured")
    ctx.console.print(f"repository: {config.repository.name}")
    ctx.console.print(f"remote url: {config.repository.remote_url or '(none)'}")
    ctx.console.print(f"main branch: {config.repository.main_branch}")
    ctx.console.print(f"config: {ctx.config_path}", Style.DIM)


@config_app.command("set")
def set_value(
    path: str = typer.Argument(..., help="Dotted config path, e.g. release.tag_prefix"),
    value: str = typer.Argument(..., help="New value (lists are comma-separated)"),
) -> None:
    """Set one configuration value."""
    ctx = build_context()
    exit_on_error(update_config(ctx.config_path, path, value), ctx)
    ctx.console.success(f"config updated: {path} = {value}")


@config_app.command("show")
def show() -> None:
    """Display the effective configuration (defaults merged with the file)."""
    ctx = build_context()
    ctx.console.print(json.dumps(ctx.config.to_dict(), indent=2))
