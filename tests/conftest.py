"""Shared pytest fixtures and test helpers for defquery tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from defquery.config.settings import DefquerySettings
from defquery.domain.definitions import Definition, Deployment, DeploymentManifest
from defquery.infrastructure.database.engine import init_database
from defquery.infrastructure.store import Store

Deployer = Callable[..., tuple[Deployment, list[Definition]]]

# Two deployments: the first ships "one" and "two", the second redeploys "one".
SCENARIO_MANIFESTS: list[dict[str, Any]] = [
    {
        "name": "examples-1",
        "definitions": [
            {"key": "one", "name": "One", "category": "Examples"},
            {"key": "two", "name": "Two", "category": "Examples2"},
        ],
    },
    {
        "name": "examples-2",
        "definitions": [{"key": "one", "name": "One", "category": "Examples"}],
    },
]


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's DEFQUERY_* environment out of the tests."""
    monkeypatch.delenv("DEFQUERY_CONFIG", raising=False)
    monkeypatch.delenv("DEFQUERY_DATABASE__URL", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(f"sqlite:///{tmp_path / 'test.db'}")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> DefquerySettings:
    return DefquerySettings.from_cli(root=tmp_path)


@pytest.fixture
def store(settings: DefquerySettings) -> Generator[Store]:
    """Empty store on a temp SQLite file."""
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def deploy(store: Store) -> Deployer:
    """Deploy definitions given as keyword dicts, returning what was created."""

    def _deploy(*definitions: dict[str, Any], name: str | None = None) -> Any:
        manifest = DeploymentManifest(name=name, definitions=list(definitions))
        return store.deployments.deploy(manifest)

    return _deploy


@pytest.fixture
def seeded_store(store: Store) -> Store:
    """Store holding one:1, two:1 (DEP-0001) and one:2 (DEP-0002)."""
    for raw in SCENARIO_MANIFESTS:
        store.deployments.deploy(DeploymentManifest.model_validate(raw))
    return store


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


def write_manifest(directory: Path, raw: dict[str, Any], filename: str = "manifest.toml") -> Path:
    """Serialize a manifest dict as TOML (flat subset used by the tests)."""
    lines: list[str] = []
    for key in ("name", "category"):
        if raw.get(key) is not None:
            lines.append(f'{key} = "{raw[key]}"')
    for definition in raw["definitions"]:
        lines.append("")
        lines.append("[[definitions]]")
        for key, value in definition.items():
            if isinstance(value, list):
                rendered = ", ".join(f'"{v}"' for v in value)
                lines.append(f"{key} = [{rendered}]")
            else:
                lines.append(f'{key} = "{value}"')
    path = directory / filename
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def manifest_writer(tmp_path: Path) -> Callable[..., Path]:
    def _write(raw: dict[str, Any], filename: str = "manifest.toml") -> Path:
        return write_manifest(tmp_path, raw, filename)

    return _write
