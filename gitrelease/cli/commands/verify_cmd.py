from __future__ import annotations

import typer

from gitrelease.cli.commands._helpers import exit_on_error
from gitrelease.cli.context import build_context
from gitrelease.core.errors import ErrorCode
from gitrelease.output.console import ConsoleProtocol, Style
from gitrelease.release.service import run_verification
from gitrelease.release.stages import validate_transition


def verify() -> None:
    """Verify the repository is ready for a release."""
    ctx = build_context()
    result = exit_on_error(run_verification(repo=ctx.repo, config=ctx.config), ctx)

    ctx.console.header("Verification")
    _print_check(ctx.console, "clean working directory", result.clean)
    _print_check(ctx.console, "tests", result.tests)
    _print_check(ctx.console, "ci checks", result.ci)
    _print_check(ctx.console, "conventional commits", result.commits)

    if result.messages:
        ctx.console.header("Issues")
        for message in result.messages:
            ctx.console.print(f"  - {message}", Style.WARNING)

    ctx.console.newline()
    if not result.overall:
        ctx.console.error("verification failed")
        raise typer.Exit(code=int(ErrorCode.VERIFY_ERROR))
    ctx.console.success("verification passed")


def stage(
    from_stage: str = typer.Argument(..., help="Current stage"),
    to_stage: str = typer.Argument(..., help="Target stage"),
) -> None:
    """Check whether a workflow stage transition is allowed."""
    ctx = build_context()
    exit_on_error(validate_transition(ctx.config.workflow.stages, from_stage, to_stage), ctx)
    ctx.console.success(f"transition allowed: {from_stage} -> {to_stage}")


def _print_check(console: ConsoleProtocol, name: str, ok: bool) -> None:
    if ok:
        console.print(f"{name}: OK", Style.SUCCESS)
    else:
        console.print(f"{name}: FAIL", Style.ERROR)
