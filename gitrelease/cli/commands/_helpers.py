"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from gitrelease.core.errors import ErrorCode
from gitrelease.core.result import Err, Result
from gitrelease.output.console import Style
from gitrelease.release.errors import ReleaseError, ReleaseErrorKind

if TYPE_CHECKING:
    from gitrelease.cli.context import CLIContext

T = TypeVar("T")
E = TypeVar("E")


_EXIT_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "invalid_input": ErrorCode.USER_ERROR,
    "invalid_version": ErrorCode.USER_ERROR,
    "dirty_worktree": ErrorCode.PRECONDITION_ERROR,
    "not_release_branch": ErrorCode.PRECONDITION_ERROR,
    "tag_missing": ErrorCode.PRECONDITION_ERROR,
    "tag_exists": ErrorCode.PRECONDITION_ERROR,
    "verification_failed": ErrorCode.VERIFY_ERROR,
    "git_failed": ErrorCode.VCS_ERROR,
    "push_failed": ErrorCode.VCS_ERROR,
    "config_failed": ErrorCode.IO_ERROR,
    "io_failed": ErrorCode.IO_ERROR,
}


def exit_code_for(error: ReleaseError) -> ErrorCode:
    return _EXIT_CODES.get(error.kind, ErrorCode.USER_ERROR)


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Exit with error if result is Err, otherwise return its value.

    Expects error objects to have 'message' and optional 'hint' attributes.
    A :class:`ReleaseError` picks its own exit code from its kind and also
    prints its details, and the tag and notes of a half-finished release.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)

        if isinstance(error, ReleaseError):
            error_code = exit_code_for(error)
            for detail in error.details:
                ctx.console.print(f"  - {detail}", Style.WARNING)
            if error.tag:
                ctx.console.print(f"tag {error.tag} was created locally", Style.WARNING)
                ctx.console.print(f"hint: git push origin {error.tag}", Style.DIM)
            if error.notes:
                ctx.console.header("Release notes")
                ctx.console.markdown(error.notes)

        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))
    return result.value


def exit_with_code(code: ErrorCode) -> NoReturn:
    raise typer.Exit(code=int(code))
