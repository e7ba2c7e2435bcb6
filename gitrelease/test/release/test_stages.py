from __future__ import annotations

from gitrelease.core.result import Err, Ok
from gitrelease.release.stages import validate_transition

STAGES = ("development", "testing", "staging", "production")


def test_one_step_forward_is_allowed() -> None:
    assert validate_transition(STAGES, "development", "testing") == Ok(None)
    assert validate_transition(STAGES, "staging", "production") == Ok(None)


def test_skipping_a_stage_is_rejected() -> None:
    result = validate_transition(STAGES, "development", "staging")

    assert isinstance(result, Err)
    assert result.error.kind == "skipped_stage"
    assert result.error.message == (
        "Cannot skip from development to staging. Must proceed through each stage."
    )
    assert result.error.hint == "next stage after development is testing"


def test_moving_backward_is_rejected() -> None:
    result = validate_transition(STAGES, "staging", "testing")

    assert isinstance(result, Err)
    assert result.error.kind == "backward"


def test_same_stage_is_backward() -> None:
    result = validate_transition(STAGES, "testing", "testing")

    assert isinstance(result, Err)
    assert result.error.kind == "backward"


def test_unknown_stage() -> None:
    for from_stage, to_stage in [("qa", "testing"), ("testing", "qa")]:
        result = validate_transition(STAGES, from_stage, to_stage)
        assert isinstance(result, Err)
        assert result.error.kind == "unknown_stage"
        assert "development, testing, staging, production" in result.error.message


def test_custom_stage_list() -> None:
    assert validate_transition(["draft", "live"], "draft", "live") == Ok(None)
