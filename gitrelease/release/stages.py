"""Workflow stage gate.

Stages form a strictly linear sequence (e.g. development -> testing ->
staging -> production). A transition is legal only when it moves exactly
one step forward.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from gitrelease.core.result import Err, Ok, Result

TransitionErrorKind = Literal["unknown_stage", "backward", "skipped_stage"]


@dataclass(frozen=True, slots=True)
class TransitionError:
    kind: TransitionErrorKind
    message: str
    hint: str | None = None


def validate_transition(
    stages: Sequence[str], from_stage: str, to_stage: str
) -> Result[None, TransitionError]:
    if from_stage not in stages or to_stage not in stages:
        return Err(
            TransitionError(
                kind="unknown_stage",
                message=f"Invalid stage: must be one of {', '.join(stages)}",
            )
        )

    from_index = stages.index(from_stage)
    to_index = stages.index(to_stage)

    if to_index <= from_index:
        return Err(
            TransitionError(
                kind="backward",
                message=(
                    f"Cannot move from {from_stage} to {to_stage}. "
                    "Workflow must progress forward."
                ),
            )
        )

    if to_index > from_index + 1:
        return Err(
            TransitionError(
                kind="skipped_stage",
                message=(
                    f"Cannot skip from {from_stage} to {to_stage}. "
                    "Must proceed through each stage."
                ),
                hint=f"next stage after {from_stage} is {stages[from_index + 1]}",
            )
        )

    return Ok(None)
