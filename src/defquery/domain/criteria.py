"""Criteria model — predicates, sort keys, and paging bounds.

Pure data with no I/O. A :class:`Criteria` is mutated while a query is
being built and handed to an executor only as a :class:`FrozenCriteria`
snapshot, so nothing the caller does afterwards can change a running query.

Predicates combine with logical AND. Sort entries apply left to right.
A sort entry is registered without a direction and stays *pending* until
:meth:`Criteria.bind_direction` fixes it; at most one entry is pending at a
time and it is always the last one.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from defquery.domain.errors import InvalidArgumentError


class DefinitionField(StrEnum):
    """Definition attributes that predicates and sorts can refer to."""

    ID = "id"
    KEY = "key"
    NAME = "name"
    CATEGORY = "category"
    VERSION = "version"
    DEPLOYMENT_ID = "deployment_id"
    MESSAGE_SUBSCRIPTION = "message_subscription"


class Operator(StrEnum):
    """Comparison applied by a predicate."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    LIKE = "like"
    LIKE_IGNORE_CASE = "like_ignore_case"
    IN = "in"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUALS = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUALS = "lte"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


SORTABLE_FIELDS = frozenset(
    {
        DefinitionField.ID,
        DefinitionField.KEY,
        DefinitionField.NAME,
        DefinitionField.CATEGORY,
        DefinitionField.VERSION,
        DefinitionField.DEPLOYMENT_ID,
    }
)

_NUMERIC_FIELDS = frozenset({DefinitionField.VERSION})


@dataclass(frozen=True)
class Predicate:
    field: DefinitionField
    operator: Operator
    value: Any


@dataclass(frozen=True)
class SortKey:
    field: DefinitionField
    direction: SortDirection | None = None

    @property
    def pending(self) -> bool:
        return self.direction is None


@dataclass(frozen=True)
class Paging:
    """Offset/limit bounds. ``max_results=None`` means unbounded."""

    first_result: int = 0
    max_results: int | None = None

    @property
    def bounded(self) -> bool:
        return self.first_result > 0 or self.max_results is not None


@dataclass(frozen=True)
class FrozenCriteria:
    """Immutable snapshot handed to an executor."""

    predicates: tuple[Predicate, ...] = ()
    sorts: tuple[SortKey, ...] = ()
    paging: Paging = field(default_factory=Paging)
    latest_only: bool = False


def _coerce_field(value: DefinitionField | str) -> DefinitionField:
    try:
        return DefinitionField(value)
    except ValueError:
        msg = f"Unknown definition field: {value!r}"
        raise InvalidArgumentError(msg) from None


def _check_non_negative_int(value: Any, what: str) -> int:
    # bool is an int subclass; reject it explicitly.
    if value is None:
        msg = f"{what} is null"
        raise InvalidArgumentError(msg)
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{what} must be an integer, got {type(value).__name__}"
        raise InvalidArgumentError(msg)
    if value < 0:
        msg = f"{what} must be non-negative, got {value}"
        raise InvalidArgumentError(msg)
    return value


def make_paging(first_result: int, max_results: int | None) -> Paging:
    """Validated paging bounds; ``max_results=None`` leaves the result unbounded."""
    first = _check_non_negative_int(first_result, "first_result")
    limit = None if max_results is None else _check_non_negative_int(max_results, "max_results")
    return Paging(first, limit)


def _validate_value(field_: DefinitionField, operator: Operator, value: Any) -> Any:
    """Return the normalized predicate value or raise InvalidArgumentError."""
    label = f"{field_.value} ({operator.value})"
    if value is None:
        msg = f"{label} value is null"
        raise InvalidArgumentError(msg)

    if operator is Operator.IN:
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            msg = f"{label} requires a collection of values"
            raise InvalidArgumentError(msg)
        members = list(value)
        for member in members:
            if member is None:
                msg = f"{label} collection contains null"
                raise InvalidArgumentError(msg)
            _check_scalar(field_, member, f"{label} member")
        return frozenset(members)

    return _check_scalar(field_, value, label)


def _check_scalar(field_: DefinitionField, value: Any, label: str) -> Any:
    if field_ in _NUMERIC_FIELDS:
        return _check_non_negative_int(value, label)
    if not isinstance(value, str):
        msg = f"{label} must be a string, got {type(value).__name__}"
        raise InvalidArgumentError(msg)
    return value


class Criteria:
    """Mutable predicate/sort/paging accumulator.

    Every mutator validates first and mutates second: a call that raises
    :class:`InvalidArgumentError` leaves the criteria exactly as it was.
    """

    def __init__(self) -> None:
        self._predicates: list[Predicate] = []
        self._sorts: list[SortKey] = []
        self._paging = Paging()
        self._latest_only = False

    @property
    def predicates(self) -> tuple[Predicate, ...]:
        return tuple(self._predicates)

    @property
    def sorts(self) -> tuple[SortKey, ...]:
        return tuple(self._sorts)

    @property
    def paging(self) -> Paging:
        return self._paging

    @property
    def latest_only(self) -> bool:
        return self._latest_only

    @property
    def has_pending_sort(self) -> bool:
        return bool(self._sorts) and self._sorts[-1].pending

    def add_predicate(
        self,
        field_: DefinitionField | str,
        operator: Operator | str,
        value: Any,
    ) -> None:
        """Append a validated predicate."""
        resolved_field = _coerce_field(field_)
        try:
            resolved_op = Operator(operator)
        except ValueError:
            msg = f"Unknown operator: {operator!r}"
            raise InvalidArgumentError(msg) from None
        normalized = _validate_value(resolved_field, resolved_op, value)
        self._predicates.append(Predicate(resolved_field, resolved_op, normalized))

    def add_sort(
        self,
        field_: DefinitionField | str,
        direction: SortDirection | str | None = None,
    ) -> None:
        """Register a sort key, optionally with its direction.

        Registering a new field while another is still pending replaces
        the pending one.
        """
        resolved = _coerce_field(field_)
        if resolved not in SORTABLE_FIELDS:
            msg = f"Field is not sortable: {resolved.value}"
            raise InvalidArgumentError(msg)
        resolved_dir = _coerce_direction(direction) if direction is not None else None

        entry = SortKey(resolved, resolved_dir)
        if self.has_pending_sort:
            self._sorts[-1] = entry
        else:
            self._sorts.append(entry)

    def bind_direction(self, direction: SortDirection | str) -> None:
        """Fix the direction of the pending sort key."""
        resolved = _coerce_direction(direction)
        if not self.has_pending_sort:
            msg = "No pending sort key: call an order_by method before asc()/desc()"
            raise InvalidArgumentError(msg)
        self._sorts[-1] = SortKey(self._sorts[-1].field, resolved)

    def set_paging(self, first_result: int, max_results: int | None) -> None:
        self._paging = make_paging(first_result, max_results)

    def set_latest_only(self, latest_only: bool = True) -> None:
        self._latest_only = latest_only

    def freeze(self) -> FrozenCriteria:
        """Snapshot the criteria for execution."""
        if self.has_pending_sort:
            msg = (
                f"Invalid query: call asc() or desc() after "
                f"order_by({self._sorts[-1].field.value})"
            )
            raise InvalidArgumentError(msg)
        return FrozenCriteria(
            predicates=tuple(self._predicates),
            sorts=tuple(self._sorts),
            paging=self._paging,
            latest_only=self._latest_only,
        )


def _coerce_direction(value: SortDirection | str) -> SortDirection:
    try:
        return SortDirection(value)
    except ValueError:
        msg = f"Unknown sort direction: {value!r}"
        raise InvalidArgumentError(msg) from None
