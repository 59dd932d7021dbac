"""Error hierarchy for the query layer.

Two kinds are raised by defquery itself: :class:`InvalidArgumentError` at
build time and :class:`AmbiguousResultError` at execution time. Store
failures are SQLAlchemy exceptions and pass through untouched.
"""

from __future__ import annotations


class DefqueryError(Exception):
    """Base class for errors raised by the query layer."""


class InvalidArgumentError(DefqueryError, ValueError):
    """A predicate, sort, or paging argument was null or structurally illegal."""


class AmbiguousResultError(DefqueryError):
    """A single-result query matched more than one definition."""

    def __init__(self, message: str = "Query returned more than one result") -> None:
        super().__init__(message)


class UnboundQueryError(DefqueryError):
    """A terminal operation was called on a query with no executor."""
