from __future__ import annotations

import typer

from gitrelease.cli.commands._helpers import exit_on_error
from gitrelease.cli.context import CLIContext, build_context
from gitrelease.output.console import Style
from gitrelease.release.naming import BRANCH_KINDS
from gitrelease.release.service import (
    create_hotfix,
    create_named_branch,
    list_releases,
    rollback,
)


def branch(
    kind: str = typer.Argument(..., help=f"Branch type: {', '.join(BRANCH_KINDS)}"),
    name: str = typer.Argument(..., help="Branch name without prefix"),
) -> None:
    """Create a branch following the configured naming conventions."""
    ctx = build_context()
    created = exit_on_error(
        create_named_branch(repo=ctx.repo, config=ctx.config, kind=kind, name=name),
        ctx,
    )
    ctx.console.success(f"created branch {created}")


def rollback_cmd(
    tag: str | None = typer.Argument(None, help="Tag to roll back to (omit to list)"),
) -> None:
    """Roll back to a previous release on a new branch."""
    ctx = build_context()
    if tag is None:
        _print_release_points(ctx, "Available rollback points")
        return

    result = exit_on_error(rollback(repo=ctx.repo, tag=tag), ctx)
    ctx.console.success(f"rolled back to {result.tag}")
    ctx.console.print(f"branch: {result.branch}")
    ctx.console.header("Next steps")
    ctx.console.print("1. Verify the rollback is correct")
    ctx.console.print(f"2. Push the rollback branch: git push origin {result.branch}")
    ctx.console.print("3. Open a pull request to merge the rollback")


def hotfix(
    tag: str | None = typer.Argument(None, help="Release tag to fix (omit to list)"),
) -> None:
    """Create a hotfix branch from a previous release."""
    ctx = build_context()
    if tag is None:
        _print_release_points(ctx, "Available tags")
        return

    result = exit_on_error(create_hotfix(repo=ctx.repo, config=ctx.config, tag=tag), ctx)
    ctx.console.success(f"created hotfix branch {result.branch}")
    ctx.console.print(f"based on tag: {result.base_tag}")
    ctx.console.print(f"new version will be: {result.version}")
    ctx.console.header("Next steps")
    ctx.console.print("1. Make your hotfix changes")
    ctx.console.print("2. Run tests and verification")
    ctx.console.print("3. Finalize the hotfix: gitrelease finalize")


def _print_release_points(ctx: CLIContext, title: str) -> None:
    points = exit_on_error(list_releases(repo=ctx.repo, config=ctx.config), ctx)
    if not points:
        ctx.console.info("no releases found")
        return
    ctx.console.header(title)
    for point in points:
        ctx.console.print(f"{point.tag} - {point.date or '?'} ({point.short_commit})")
    ctx.console.print("hint: pass one of the tags above", Style.DIM)
