"""SQLAlchemy Core table definitions for the definition repository.

Deployments own their definitions: deleting a deployment row cascades to
``process_definitions`` and on to ``message_subscriptions``. SQLite only
honours the cascade with ``PRAGMA foreign_keys=ON``, which the engine sets
on every connection.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

deployments = Table(
    "deployments",
    metadata,
    Column("id", Text, primary_key=True),  # DEP-NNNN
    Column("name", Text),
    Column("category", Text),
    Column("deployed_at", Text, nullable=False),
)

process_definitions = Table(
    "process_definitions",
    metadata,
    Column("id", Text, primary_key=True),  # {key}:{version}:{deployment_id}
    Column("key", Text, nullable=False),
    Column("name", Text),
    Column("category", Text),
    Column("version", Integer, nullable=False),
    Column(
        "deployment_id",
        Text,
        ForeignKey("deployments.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("description", Text),
    UniqueConstraint("key", "version"),
    CheckConstraint("version >= 1", name="ck_process_definitions_version_positive"),
)

message_subscriptions = Table(
    "message_subscriptions",
    metadata,
    Column(
        "definition_id",
        Text,
        ForeignKey("process_definitions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("name", Text, nullable=False),
    UniqueConstraint("definition_id", "name"),
)

id_counters = Table(
    "id_counters",
    metadata,
    Column("type_prefix", Text, primary_key=True),
    Column("next_value", Integer, nullable=False, default=1, server_default="1"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_process_definitions_key", process_definitions.c["key"])
Index("ix_process_definitions_deployment", process_definitions.c.deployment_id)
Index("ix_message_subscriptions_name", message_subscriptions.c.name)
