"""Tests for the format_result dispatcher and OutputSettings."""

import json

import pytest
from pydantic import ValidationError

from defquery.output.formatters import OutputSettings, format_result
from defquery.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code="ERR", message=msg),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False

    def test_frozen(self) -> None:
        s = OutputSettings(json_output=True)
        with pytest.raises(ValidationError):
            s.quiet = True  # type: ignore[misc]


class TestFormatResult:
    def test_json_mode_returns_valid_json(self) -> None:
        settings = OutputSettings(json_output=True)
        output = format_result(_ok("count_definitions", count=3), settings=settings)
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "count_definitions"
        assert data["data"]["count"] == 3

    def test_json_mode_error(self) -> None:
        settings = OutputSettings(json_output=True)
        output = format_result(_err("native_query", "Bad"), settings=settings)
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["message"] == "Bad"

    def test_json_wins_over_quiet(self) -> None:
        output = format_result(_ok(), settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["op"] == "test"

    def test_quiet_mode(self) -> None:
        output = format_result(_ok("deploy", id="DEP-0001"), settings=OutputSettings(quiet=True))
        assert output == "OK: deploy"

    def test_default_is_rich(self) -> None:
        output = format_result(_ok("unknown_op", answer=42))
        assert "OK" in output
        assert "answer" in output
        assert "42" in output
