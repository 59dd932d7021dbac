"""Store — the single dependency injected into every service.

Owns the database engine and hands out query builders bound to it.
The engine is created (and the schema initialized) on construction;
:meth:`close` disposes of its connection pool.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.engine import make_url

from defquery.domain.query import DefinitionQuery
from defquery.infrastructure.database.engine import init_database
from defquery.infrastructure.repositories import (
    DefinitionQueryRepository,
    DeploymentRepository,
    NativeDefinitionQuery,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from defquery.config.settings import DefquerySettings


class Store:
    """Definition store bound to one database."""

    def __init__(self, settings: DefquerySettings) -> None:
        self._settings = settings
        url = settings.database_url
        _ensure_sqlite_parent(url)
        self._engine = init_database(url, echo=settings.database.echo)
        self._definitions = DefinitionQueryRepository(self._engine)
        self._deployments = DeploymentRepository(self._engine)

    @property
    def settings(self) -> DefquerySettings:
        return self._settings

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def definitions(self) -> DefinitionQueryRepository:
        return self._definitions

    @property
    def deployments(self) -> DeploymentRepository:
        return self._deployments

    def create_definition_query(self) -> DefinitionQuery:
        """A fresh criteria query bound to this store."""
        return DefinitionQuery(self._definitions)

    def create_native_definition_query(self) -> NativeDefinitionQuery:
        """A fresh native SQL query bound to this store."""
        return NativeDefinitionQuery(self._engine)

    def close(self) -> None:
        self._engine.dispose()


def _ensure_sqlite_parent(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or parsed.database in (None, "", ":memory:"):
        return
    Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
