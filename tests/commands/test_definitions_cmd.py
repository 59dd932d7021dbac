"""Tests for the definitions command group."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from defquery.cli import cli

SCENARIO = [
    {
        "name": "examples-1",
        "definitions": [
            {"key": "one", "name": "One", "category": "Examples"},
            {"key": "two", "name": "Two", "category": "Examples2"},
        ],
    },
    {
        "name": "examples-2",
        "definitions": [
            {"key": "one", "name": "One", "category": "Examples", "message_subscriptions": ["go"]}
        ],
    },
]


@pytest.fixture
def seeded(
    cli_runner: CliRunner, manifest_writer: Callable[..., Path], _isolated_root: None
) -> None:
    for index, raw in enumerate(SCENARIO):
        path = manifest_writer(raw, f"manifest-{index}.toml")
        result = cli_runner.invoke(cli, ["deploy", str(path)])
        assert result.exit_code == 0, result.output


def _json(runner: CliRunner, *args: str) -> dict[str, Any]:
    result = runner.invoke(cli, ["--json", *args])
    return json.loads(result.output)


@pytest.mark.usefixtures("seeded")
class TestListCommand:
    def test_list_all(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list")
        assert data["ok"] is True
        assert data["op"] == "list_definitions"
        assert data["data"]["total"] == 3

    def test_filters(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list", "--key", "one", "--version", "2")
        assert [i["id"] for i in data["data"]["items"]] == ["one:2:DEP-0002"]

    def test_like_and_category(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list", "--category-like", "%amples2")
        assert [i["key"] for i in data["data"]["items"]] == ["two"]

    def test_version_bounds(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list", "--min-version", "2")
        assert data["data"]["total"] == 1
        data = _json(cli_runner, "definitions", "list", "--max-version", "1")
        assert data["data"]["total"] == 2

    def test_multiple_ids(self, cli_runner: CliRunner) -> None:
        data = _json(
            cli_runner,
            "definitions",
            "list",
            "--id",
            "one:1:DEP-0001",
            "--id",
            "two:1:DEP-0001",
        )
        assert data["data"]["total"] == 2

    def test_latest_sorted(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list", "--latest", "--sort", "key:desc")
        assert [i["id"] for i in data["data"]["items"]] == ["two:1:DEP-0001", "one:2:DEP-0002"]

    def test_latest_excludes_superseded_version(self, cli_runner: CliRunner) -> None:
        data = _json(
            cli_runner, "definitions", "list", "--key", "one", "--version", "1", "--latest"
        )
        assert data["ok"] is True
        assert data["data"]["items"] == []
        assert data["data"]["total"] == 0

    def test_multi_sort(self, cli_runner: CliRunner) -> None:
        data = _json(
            cli_runner, "definitions", "list", "--sort", "key", "--sort", "version:desc"
        )
        assert [(i["key"], i["version"]) for i in data["data"]["items"]] == [
            ("one", 2),
            ("one", 1),
            ("two", 1),
        ]

    def test_paging(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list", "--first", "1", "--max", "1")
        assert data["data"]["count"] == 1
        assert data["data"]["total"] == 3
        assert data["data"]["items"][0]["id"] == "one:2:DEP-0002"

    def test_message_subscription(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list", "--message-subscription", "go")
        assert [i["id"] for i in data["data"]["items"]] == ["one:2:DEP-0002"]

    def test_bad_sort_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "definitions", "list", "--sort", "version:sideways"]
        )
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["error"]["code"] == "INVALID_ARGUMENT"

    def test_negative_version_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "definitions", "list", "--version", "-1"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "INVALID_ARGUMENT"

    def test_rich_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["definitions", "list", "--key", "two"])
        assert result.exit_code == 0
        assert "two:1:DEP-0001" in result.output
        assert "1 definitions" in result.output

    def test_quiet_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "definitions", "list", "--key", "one"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["one:1:DEP-0001", "one:2:DEP-0002"]


@pytest.mark.usefixtures("seeded")
class TestCountCommand:
    def test_count(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "count", "--key", "one")
        assert data["data"]["count"] == 2

    def test_count_latest_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "definitions", "count", "--latest"])
        assert result.exit_code == 0
        assert result.output.strip() == "2"


@pytest.mark.usefixtures("seeded")
class TestGetCommand:
    def test_get_latest(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "get", "--key", "one", "--latest")
        assert data["ok"] is True
        assert data["data"]["id"] == "one:2:DEP-0002"
        assert data["data"]["message_subscriptions"] == ["go"]

    def test_get_ambiguous(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "definitions", "get", "--key", "one"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "AMBIGUOUS_RESULT"

    def test_get_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "definitions", "get", "--key", "nope"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "NOT_FOUND"

    def test_get_rich(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["definitions", "get", "--id", "two:1:DEP-0001"])
        assert result.exit_code == 0
        assert "two:1:DEP-0001" in result.output


@pytest.mark.usefixtures("_isolated_root")
class TestEmptyStore:
    def test_list_empty(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "definitions", "list")
        assert data["data"] == {"count": 0, "total": 0, "items": []}

    def test_default_max_from_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "defquery.toml").write_text("[query]\ndefault_max_results = 5\n")
        data = _json(cli_runner, "definitions", "list")
        assert data["meta"]["max_results"] == 5
