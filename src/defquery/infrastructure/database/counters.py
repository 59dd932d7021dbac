"""Atomic sequential id generation for deployments.

Uses the ``id_counters`` table so ids are gap-free and never reused, even
after the deployment they named has been deleted. Minimum 4 digits, grows
naturally past 9999.

The caller owns the transaction — pass a ``Connection`` obtained from
``engine.begin()`` so the counter increment participates in the same
atomic transaction as the rows it names.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update

from defquery.infrastructure.database.engine import SEQUENTIAL_PREFIXES
from defquery.infrastructure.database.schema import id_counters

if TYPE_CHECKING:
    from sqlalchemy import Connection


def next_sequential_id(conn: Connection, type_prefix: str = "DEP-") -> str:
    """Claim the next sequential id for *type_prefix*.

    Args:
        conn: Active SQLAlchemy connection (caller owns the transaction).
        type_prefix: A prefix listed in ``SEQUENTIAL_PREFIXES``.

    Returns:
        The new id string (e.g. ``"DEP-0001"``).

    Raises:
        ValueError: If *type_prefix* is not a recognized sequential prefix.
    """
    if type_prefix not in SEQUENTIAL_PREFIXES:
        msg = (
            f"Unknown sequential type prefix: {type_prefix!r}. "
            f"Expected one of {sorted(SEQUENTIAL_PREFIXES)}"
        )
        raise ValueError(msg)

    current_value: int = conn.execute(
        select(id_counters.c.next_value).where(id_counters.c.type_prefix == type_prefix)
    ).scalar_one()

    conn.execute(
        update(id_counters)
        .where(id_counters.c.type_prefix == type_prefix)
        .values(next_value=current_value + 1)
    )

    return f"{type_prefix}{current_value:04d}"
