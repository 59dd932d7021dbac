"""Criteria executor for process definitions.

Translates a :class:`FrozenCriteria` into SQLAlchemy Core statements.
Every public method opens its own connection, reads, and returns fresh
domain objects; nothing is cached between calls. Store errors propagate
unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from sqlalchemy import ColumnElement, FromClause, Select, Subquery, func, select
from sqlalchemy.engine import Engine

from defquery.domain.criteria import (
    DefinitionField,
    FrozenCriteria,
    Operator,
    Predicate,
    SortDirection,
)
from defquery.domain.definitions import Definition
from defquery.domain.errors import AmbiguousResultError
from defquery.infrastructure.database.schema import message_subscriptions, process_definitions
from defquery.infrastructure.repositories.versions import latest_versions

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

_Comparator = Callable[[ColumnElement[Any], Any], ColumnElement[bool]]

_COMPARATORS: dict[Operator, _Comparator] = {
    Operator.EQUALS: lambda col, value: col == value,
    Operator.NOT_EQUALS: lambda col, value: col != value,
    Operator.LIKE: lambda col, value: col.like(value, escape=LIKE_ESCAPE),
    Operator.LIKE_IGNORE_CASE: lambda col, value: func.lower(col).like(
        value.lower(), escape=LIKE_ESCAPE
    ),
    Operator.IN: lambda col, value: col.in_(sorted(value)),
    Operator.GREATER_THAN: lambda col, value: col > value,
    Operator.GREATER_THAN_OR_EQUALS: lambda col, value: col >= value,
    Operator.LESS_THAN: lambda col, value: col < value,
    Operator.LESS_THAN_OR_EQUALS: lambda col, value: col <= value,
}


def _predicate_clause(
    predicate: Predicate, source: FromClause = process_definitions
) -> ColumnElement[bool]:
    """Render one predicate as a WHERE clause on *source* (definition rows)."""
    if predicate.field is DefinitionField.MESSAGE_SUBSCRIPTION:
        subscribers = select(message_subscriptions.c.definition_id).where(
            _COMPARATORS[predicate.operator](message_subscriptions.c.name, predicate.value)
        )
        return source.c.id.in_(subscribers)

    column = source.c[predicate.field.value]
    return _COMPARATORS[predicate.operator](column, predicate.value)


class DefinitionQueryRepository:
    """Executes criteria queries; satisfies ``DefinitionQueryExecutor``."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _matches(self, criteria: FrozenCriteria) -> Subquery:
        """The logical result set: filtered, then version-resolved.

        With ``latest_only`` the candidates are filtered by every
        non-version predicate, reduced to each key's newest row, and only
        then tested against the version predicates. ``key("k").version(1)``
        is therefore empty once ``k`` has a version 2.
        """
        latest = criteria.latest_only
        candidates: Select = select(process_definitions)
        deferred: list[Predicate] = []
        for predicate in criteria.predicates:
            if latest and predicate.field is DefinitionField.VERSION:
                deferred.append(predicate)
            else:
                candidates = candidates.where(_predicate_clause(predicate))
        if not latest:
            return candidates.subquery("matches")

        resolved = latest_versions(candidates).subquery("resolved")
        stmt = select(resolved)
        for predicate in deferred:
            stmt = stmt.where(_predicate_clause(predicate, resolved))
        return stmt.subquery("matches")

    def _ordered(self, matches: Subquery, criteria: FrozenCriteria) -> Select:
        stmt = select(matches)
        for sort in criteria.sorts:
            column = matches.c[sort.field.value]
            descending = sort.direction is SortDirection.DESC
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        # id breaks ties (and is the whole order when no sort was requested)
        return stmt.order_by(matches.c.id.asc())

    def list(self, criteria: FrozenCriteria) -> Sequence[Definition]:
        """Fetch matching definitions in sort order, honouring paging."""
        stmt = self._ordered(self._matches(criteria), criteria)
        paging = criteria.paging
        if paging.first_result:
            stmt = stmt.offset(paging.first_result)
        if paging.max_results is not None:
            stmt = stmt.limit(paging.max_results)

        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        logger.debug("Definition list matched %d rows", len(rows))
        return [Definition.model_validate(dict(row)) for row in rows]

    def count(self, criteria: FrozenCriteria) -> int:
        """Count matching definitions; paging bounds are ignored."""
        stmt = select(func.count()).select_from(self._matches(criteria))
        with self._engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one() or 0)

    def single(self, criteria: FrozenCriteria) -> Definition | None:
        """Return the sole match, ``None`` if there is none.

        Paging bounds are ignored. At most two rows are fetched.

        Raises:
            AmbiguousResultError: More than one definition matched.
        """
        stmt = self._ordered(self._matches(criteria), criteria).limit(2)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()

        if len(rows) > 1:
            msg = "Query returned more than one result; single_result() requires at most one"
            raise AmbiguousResultError(msg)
        if not rows:
            return None
        return Definition.model_validate(dict(rows[0]))

    def get(self, definition_id: str) -> Definition | None:
        """Fetch one definition by id."""
        stmt = select(process_definitions).where(process_definitions.c.id == definition_id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return Definition.model_validate(dict(row)) if row is not None else None

    def subscription_names(self, definition_id: str) -> Sequence[str]:
        """Names of the message subscriptions declared by a definition."""
        stmt = (
            select(message_subscriptions.c.name)
            .where(message_subscriptions.c.definition_id == definition_id)
            .order_by(message_subscriptions.c.name)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [str(row.name) for row in rows]
