from __future__ import annotations

import typer

from gitrelease.cli.commands._helpers import exit_on_error
from gitrelease.cli.context import build_context
from gitrelease.output.console import Style
from gitrelease.release.service import (
    finalize_release,
    list_releases,
    next_version,
    prepare_release,
    release_notes_for,
)


def prepare(
    version: str | None = typer.Argument(
        None, help="Version to release (default: suggested from commits)"
    ),
) -> None:
    """Verify the repository and create a release branch."""
    ctx = build_context()
    prepared = exit_on_error(
        prepare_release(repo=ctx.repo, config=ctx.config, version=version),
        ctx,
    )

    ctx.console.success("release prepared")
    ctx.console.print(f"version: {prepared.version}")
    ctx.console.print(f"branch: {prepared.branch}")
    ctx.console.print(f"tag: {prepared.tag}")
    ctx.console.header("Next steps")
    ctx.console.print("1. Make any final adjustments")
    ctx.console.print("2. Run tests and verification")
    ctx.console.print("3. Finalize the release: gitrelease finalize")


def finalize() -> None:
    """Tag the current release or hotfix branch and push it."""
    ctx = build_context()
    finalized = exit_on_error(
        finalize_release(repo=ctx.repo, config=ctx.config, root=ctx.root),
        ctx,
    )

    ctx.console.success("release finalized")
    ctx.console.print(f"version: {finalized.version}")
    ctx.console.print(f"tag: {finalized.tag}")
    for path in finalized.artifacts:
        ctx.console.print(f"artifact: {path}", Style.DIM)
    ctx.console.header("Release notes")
    ctx.console.markdown(finalized.notes)


def next_version_cmd() -> None:
    """Suggest the next version based on commits since the latest tag."""
    ctx = build_context()
    suggested = exit_on_error(next_version(repo=ctx.repo, config=ctx.config), ctx)
    ctx.console.print(f"Suggested next version: {suggested}")


def list_cmd() -> None:
    """List all releases in version order."""
    ctx = build_context()
    points = exit_on_error(list_releases(repo=ctx.repo, config=ctx.config), ctx)
    if not points:
        ctx.console.info("no releases found")
        return

    ctx.console.header("Releases")
    for point in points:
        ctx.console.print(f"{point.tag} - {point.date or '?'} ({point.short_commit})")


def notes(
    version: str = typer.Argument(..., help="Released version or tag"),
) -> None:
    """Show release notes for an existing release."""
    ctx = build_context()
    text = exit_on_error(
        release_notes_for(repo=ctx.repo, config=ctx.config, version=version),
        ctx,
    )
    ctx.console.markdown(text)
