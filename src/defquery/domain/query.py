"""DefinitionQuery — fluent, eagerly validating query builder.

Usage::

    definitions = (
        store.create_definition_query()
        .key_like("invoice%")
        .latest_version()
        .order_by_key()
        .asc()
        .list()
    )

Every setter validates its argument before recording it and returns the
builder, so calls chain. Bad input raises :class:`InvalidArgumentError`
immediately; nothing reaches the store until a terminal operation
(:meth:`list`, :meth:`list_page`, :meth:`count`, :meth:`single_result`)
freezes the criteria and hands it to the executor.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from defquery.domain.criteria import (
    Criteria,
    DefinitionField,
    FrozenCriteria,
    Operator,
    SortDirection,
)
from defquery.domain.definitions import Definition
from defquery.domain.errors import UnboundQueryError


class DefinitionQueryExecutor(Protocol):
    """Store-side counterpart of :class:`DefinitionQuery`."""

    def list(self, criteria: FrozenCriteria) -> Sequence[Definition]: ...

    def count(self, criteria: FrozenCriteria) -> int: ...

    def single(self, criteria: FrozenCriteria) -> Definition | None: ...


class DefinitionQuery:
    """Accumulates predicates and sorts over process definitions."""

    def __init__(self, executor: DefinitionQueryExecutor | None = None) -> None:
        self._executor = executor
        self._criteria = Criteria()

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    def _where(self, field_: DefinitionField, operator: Operator, value: Any) -> DefinitionQuery:
        self._criteria.add_predicate(field_, operator, value)
        return self

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def definition_id(self, definition_id: str) -> DefinitionQuery:
        return self._where(DefinitionField.ID, Operator.EQUALS, definition_id)

    def definition_ids(self, definition_ids: Iterable[str]) -> DefinitionQuery:
        """Only definitions whose id is in *definition_ids*. Empty matches nothing."""
        return self._where(DefinitionField.ID, Operator.IN, definition_ids)

    def key(self, key: str) -> DefinitionQuery:
        return self._where(DefinitionField.KEY, Operator.EQUALS, key)

    def key_like(self, pattern: str) -> DefinitionQuery:
        """SQL LIKE on key: ``%`` any run, ``_`` one char, ``\\`` escapes."""
        return self._where(DefinitionField.KEY, Operator.LIKE, pattern)

    def key_like_ignore_case(self, pattern: str) -> DefinitionQuery:
        return self._where(DefinitionField.KEY, Operator.LIKE_IGNORE_CASE, pattern)

    def name(self, name: str) -> DefinitionQuery:
        return self._where(DefinitionField.NAME, Operator.EQUALS, name)

    def name_like(self, pattern: str) -> DefinitionQuery:
        return self._where(DefinitionField.NAME, Operator.LIKE, pattern)

    def name_like_ignore_case(self, pattern: str) -> DefinitionQuery:
        return self._where(DefinitionField.NAME, Operator.LIKE_IGNORE_CASE, pattern)

    def category(self, category: str) -> DefinitionQuery:
        return self._where(DefinitionField.CATEGORY, Operator.EQUALS, category)

    def category_like(self, pattern: str) -> DefinitionQuery:
        return self._where(DefinitionField.CATEGORY, Operator.LIKE, pattern)

    def category_not_equals(self, category: str) -> DefinitionQuery:
        return self._where(DefinitionField.CATEGORY, Operator.NOT_EQUALS, category)

    def version(self, version: int) -> DefinitionQuery:
        return self._where(DefinitionField.VERSION, Operator.EQUALS, version)

    def version_greater_than(self, version: int) -> DefinitionQuery:
        return self._where(DefinitionField.VERSION, Operator.GREATER_THAN, version)

    def version_greater_than_or_equals(self, version: int) -> DefinitionQuery:
        return self._where(DefinitionField.VERSION, Operator.GREATER_THAN_OR_EQUALS, version)

    def version_lower_than(self, version: int) -> DefinitionQuery:
        return self._where(DefinitionField.VERSION, Operator.LESS_THAN, version)

    def version_lower_than_or_equals(self, version: int) -> DefinitionQuery:
        return self._where(DefinitionField.VERSION, Operator.LESS_THAN_OR_EQUALS, version)

    def deployment_id(self, deployment_id: str) -> DefinitionQuery:
        return self._where(DefinitionField.DEPLOYMENT_ID, Operator.EQUALS, deployment_id)

    def deployment_ids(self, deployment_ids: Iterable[str]) -> DefinitionQuery:
        return self._where(DefinitionField.DEPLOYMENT_ID, Operator.IN, deployment_ids)

    def message_event_subscription_name(self, name: str) -> DefinitionQuery:
        """Only definitions that declare a message subscription called *name*."""
        return self._where(DefinitionField.MESSAGE_SUBSCRIPTION, Operator.EQUALS, name)

    def latest_version(self) -> DefinitionQuery:
        """Keep only the highest matching version of each key."""
        self._criteria.set_latest_only()
        return self

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def order_by(self, field_: DefinitionField | str) -> DefinitionQuery:
        """Register a sort key; follow with :meth:`asc` or :meth:`desc`."""
        self._criteria.add_sort(field_)
        return self

    def order_by_definition_id(self) -> DefinitionQuery:
        return self.order_by(DefinitionField.ID)

    def order_by_key(self) -> DefinitionQuery:
        return self.order_by(DefinitionField.KEY)

    def order_by_name(self) -> DefinitionQuery:
        return self.order_by(DefinitionField.NAME)

    def order_by_category(self) -> DefinitionQuery:
        return self.order_by(DefinitionField.CATEGORY)

    def order_by_version(self) -> DefinitionQuery:
        return self.order_by(DefinitionField.VERSION)

    def order_by_deployment_id(self) -> DefinitionQuery:
        return self.order_by(DefinitionField.DEPLOYMENT_ID)

    def asc(self) -> DefinitionQuery:
        self._criteria.bind_direction(SortDirection.ASC)
        return self

    def desc(self) -> DefinitionQuery:
        self._criteria.bind_direction(SortDirection.DESC)
        return self

    def page(self, first_result: int, max_results: int | None) -> DefinitionQuery:
        self._criteria.set_paging(first_result, max_results)
        return self

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def _bound_executor(self) -> DefinitionQueryExecutor:
        if self._executor is None:
            msg = "DefinitionQuery is not bound to a store"
            raise UnboundQueryError(msg)
        return self._executor

    def list(self) -> Sequence[Definition]:
        """Matching definitions, sorted and paged."""
        criteria = self._criteria.freeze()
        return self._bound_executor().list(criteria)

    def list_page(self, first_result: int, max_results: int) -> Sequence[Definition]:
        self.page(first_result, max_results)
        return self.list()

    def count(self) -> int:
        """Number of matching definitions, ignoring paging bounds."""
        criteria = self._criteria.freeze()
        return self._bound_executor().count(criteria)

    def single_result(self) -> Definition | None:
        """The only match, or None.

        Raises:
            AmbiguousResultError: More than one definition matched.
        """
        criteria = self._criteria.freeze()
        return self._bound_executor().single(criteria)
