"""Database engine setup.

Any SQLAlchemy URL is accepted. SQLite connections get foreign keys
enabled (required for deployment cascades) and, for file databases, WAL
mode so concurrent readers never block on a writer.

SQLAlchemy Core (not ORM) is used: the query layer maps rows to frozen
pydantic models itself and has no use for identity maps or sessions.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Engine, make_url

from defquery.infrastructure.database.schema import id_counters, metadata

logger = logging.getLogger(__name__)

SEQUENTIAL_PREFIXES = ("DEP-",)


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for *url* with SQLite pragmas applied when relevant."""
    parsed = make_url(url)
    engine = create_engine(parsed, echo=echo)

    if parsed.get_backend_name() == "sqlite":
        in_memory = parsed.database in (None, "", ":memory:")

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(url: str, *, echo: bool = False) -> Engine:
    """Create all tables and seed the id counters.

    Idempotent — safe to call on an existing database.

    Returns the engine ready for use.
    """
    engine = create_db_engine(url, echo=echo)
    metadata.create_all(engine)
    _seed_counters(engine)
    logger.debug("Database initialized at %s", engine.url.render_as_string(hide_password=True))
    return engine


def _seed_counters(engine: Engine) -> None:
    """Insert initial counter rows for sequential id prefixes if missing."""
    with engine.begin() as conn:
        for prefix in SEQUENTIAL_PREFIXES:
            row = conn.execute(
                select(id_counters.c.type_prefix).where(id_counters.c.type_prefix == prefix)
            ).first()
            if row is None:
                conn.execute(insert(id_counters).values(type_prefix=prefix, next_value=1))
