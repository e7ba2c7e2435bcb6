"""Tests for gitrelease.core.errors module."""

from gitrelease.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract and must stay stable."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.PRECONDITION_ERROR == 2
        assert ErrorCode.VCS_ERROR == 3
        assert ErrorCode.VERIFY_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_values_are_unique(self) -> None:
        values = [int(code) for code in ErrorCode]
        assert len(values) == len(set(values))


class TestErrorCodeUsage:
    def test_can_use_as_int(self) -> None:
        code: int = ErrorCode.VCS_ERROR
        assert code == 3
