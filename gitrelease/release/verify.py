"""Pre-release verification.

Four independent checks run in a fixed order (clean working tree, tests,
CI, conventional commits) and fold into one pass/fail result. A check that
is disabled in the configuration counts as passed. Diagnostic messages
accumulate across every failing check.

Test and CI results come from a :class:`CheckProvider`. The default
:class:`StubCheckProvider` reports everything as passing; swap in a real
provider to run a test suite or query a CI service.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from gitrelease.core.config import Config
from gitrelease.git.repository import CommitRecord
from gitrelease.release.commits import non_compliant


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    ok: bool
    message: str | None = None

    @classmethod
    def passed(cls) -> CheckOutcome:
        return cls(ok=True)

    @classmethod
    def failed(cls, message: str) -> CheckOutcome:
        return cls(ok=False, message=message)


class CheckProvider(Protocol):
    def run_tests(self) -> CheckOutcome:
        """Run the project's test suite."""
        ...

    def ci_check(self, name: str) -> CheckOutcome:
        """Report the status of the named CI check."""
        ...


class StubCheckProvider:
    """Placeholder provider: tests are not run and CI is not queried.

    Every check reports success until a real implementation is plugged in.
    """

    def run_tests(self) -> CheckOutcome:
        return CheckOutcome.passed()

    def ci_check(self, name: str) -> CheckOutcome:
        return CheckOutcome.passed()


class WorkTree(Protocol):
    def is_clean(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class VerificationResult:
    clean: bool
    tests: bool
    ci: bool
    commits: bool
    messages: tuple[str, ...] = ()
    non_compliant: tuple[CommitRecord, ...] = ()

    @property
    def overall(self) -> bool:
        return self.clean and self.tests and self.ci and self.commits


def verify_release(
    worktree: WorkTree,
    commits: Sequence[CommitRecord],
    config: Config,
    provider: CheckProvider | None = None,
) -> VerificationResult:
    """Run all release checks against ``commits`` (those since the latest tag)."""
    provider = provider or StubCheckProvider()
    messages: list[str] = []

    clean = True
    if config.workflow.require_clean_work_dir:
        clean = worktree.is_clean()
        if not clean:
            messages.append("Working directory is not clean")

    tests = True
    if config.verification.required_tests:
        outcome = provider.run_tests()
        tests = outcome.ok
        if not tests:
            messages.append(outcome.message or "Tests failed or were not run")

    ci = True
    for name in config.verification.required_ci_checks:
        outcome = provider.ci_check(name)
        if not outcome.ok:
            ci = False
            detail = f": {outcome.message}" if outcome.message else ""
            messages.append(f"CI check '{name}' failed{detail}")

    offenders: tuple[CommitRecord, ...] = ()
    if config.verification.enforce_conventional_commits:
        offenders = non_compliant(commits)
        if offenders:
            listing = "; ".join(f"{c.hash}: {c.subject}" for c in offenders)
            messages.append(
                f"{len(offenders)} commit(s) do not follow conventional commits format ({listing})"
            )

    return VerificationResult(
        clean=clean,
        tests=tests,
        ci=ci,
        commits=not offenders,
        messages=tuple(messages),
        non_compliant=offenders,
    )
