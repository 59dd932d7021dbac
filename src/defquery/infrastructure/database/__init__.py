"""Database engine, schema, and id counters via SQLAlchemy Core."""

from defquery.infrastructure.database.counters import next_sequential_id
from defquery.infrastructure.database.engine import create_db_engine, init_database
from defquery.infrastructure.database.schema import (
    deployments,
    id_counters,
    message_subscriptions,
    metadata,
    process_definitions,
)

__all__ = [
    "create_db_engine",
    "deployments",
    "id_counters",
    "init_database",
    "message_subscriptions",
    "metadata",
    "next_sequential_id",
    "process_definitions",
]
