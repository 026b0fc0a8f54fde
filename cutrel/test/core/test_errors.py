"""Tests for cutrel.core.errors module."""

from cutrel.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.STAGE_ERROR == 3
        assert ErrorCode.ESCALATED == 4
        assert ErrorCode.RECOVERY_FAILED == 5
        assert ErrorCode.INTERRUPTED == 130

    def test_every_failure_is_nonzero(self) -> None:
        assert all(code != 0 for code in ErrorCode if code is not ErrorCode.OK)

    def test_str(self) -> None:
        assert str(ErrorCode.RECOVERY_FAILED) == "recovery failed"

