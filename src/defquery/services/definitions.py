"""DefinitionService — criteria and native queries behind ServiceResult.

Four read-only surfaces:
- list_definitions: filtered, sorted, paged listing plus the unpaged total
- count_definitions: size of the filtered result set
- get_definition: single-result lookup with its message subscriptions
- native_query: raw SQL with ``#{name}`` parameters

Filters arrive as a mapping from builder setter name to value (see
:data:`FILTER_SETTERS`); sorts as ``"field"`` or ``"field:asc|desc"``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import structlog

from defquery.domain.criteria import SortDirection, make_paging
from defquery.domain.errors import InvalidArgumentError
from defquery.domain.query import DefinitionQuery
from defquery.services.base import BaseService
from defquery.services.result import ServiceResult

log = structlog.get_logger(__name__)

FILTER_SETTERS: dict[str, Callable[[DefinitionQuery, Any], DefinitionQuery]] = {
    "definition_id": DefinitionQuery.definition_id,
    "definition_ids": DefinitionQuery.definition_ids,
    "key": DefinitionQuery.key,
    "key_like": DefinitionQuery.key_like,
    "key_like_ignore_case": DefinitionQuery.key_like_ignore_case,
    "name": DefinitionQuery.name,
    "name_like": DefinitionQuery.name_like,
    "name_like_ignore_case": DefinitionQuery.name_like_ignore_case,
    "category": DefinitionQuery.category,
    "category_like": DefinitionQuery.category_like,
    "category_not_equals": DefinitionQuery.category_not_equals,
    "version": DefinitionQuery.version,
    "version_greater_than": DefinitionQuery.version_greater_than,
    "version_greater_than_or_equals": DefinitionQuery.version_greater_than_or_equals,
    "version_lower_than": DefinitionQuery.version_lower_than,
    "version_lower_than_or_equals": DefinitionQuery.version_lower_than_or_equals,
    "deployment_id": DefinitionQuery.deployment_id,
    "deployment_ids": DefinitionQuery.deployment_ids,
    "message_subscription": DefinitionQuery.message_event_subscription_name,
}


def parse_sort(spec: str) -> tuple[str, SortDirection]:
    """Split ``"field[:direction]"``; direction defaults to ascending.

    Examples:
        >>> parse_sort("version:desc")
        ('version', <SortDirection.DESC: 'desc'>)
        >>> parse_sort("key")
        ('key', <SortDirection.ASC: 'asc'>)
    """
    field_name, _, direction = spec.partition(":")
    try:
        return field_name.strip(), SortDirection((direction or "asc").strip().lower())
    except ValueError:
        msg = f"Unknown sort direction in {spec!r}; expected asc or desc"
        raise InvalidArgumentError(msg) from None


class DefinitionService(BaseService):
    """Read-only access to process definitions."""

    def _build(
        self,
        filters: Mapping[str, Any] | None,
        *,
        latest: bool = False,
        sort: Sequence[str] = (),
    ) -> DefinitionQuery:
        query = self._store.create_definition_query()
        for name, value in (filters or {}).items():
            setter = FILTER_SETTERS.get(name)
            if setter is None:
                msg = f"Unknown filter: {name!r}"
                raise InvalidArgumentError(msg)
            setter(query, value)
        if latest:
            query.latest_version()
        for spec in sort:
            field_name, direction = parse_sort(spec)
            query.order_by(field_name)
            if direction is SortDirection.DESC:
                query.desc()
            else:
                query.asc()
        return query

    # ------------------------------------------------------------------
    # list_definitions
    # ------------------------------------------------------------------

    def list_definitions(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        latest: bool = False,
        sort: Sequence[str] = (),
        first_result: int = 0,
        max_results: int | None = None,
    ) -> ServiceResult:
        """List matching definitions.

        ``data["count"]`` is the size of the returned page and
        ``data["total"]`` the unpaged number of matches. When
        *max_results* is None the ``[query] default_max_results`` setting
        applies.
        """

        def run() -> ServiceResult:
            limit = max_results
            if limit is None:
                limit = self._store.settings.query.default_max_results
            query = self._build(filters, latest=latest, sort=sort)
            query.page(first_result, limit)
            items = [d.model_dump() for d in query.list()]
            total = query.count()
            log.debug("definitions.list", count=len(items), total=total)
            return ServiceResult(
                ok=True,
                op="list_definitions",
                data={"count": len(items), "total": total, "items": items},
                meta={"first_result": first_result, "max_results": limit},
            )

        return self._guard("list_definitions", run)

    # ------------------------------------------------------------------
    # count_definitions
    # ------------------------------------------------------------------

    def count_definitions(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        latest: bool = False,
    ) -> ServiceResult:
        def run() -> ServiceResult:
            total = self._build(filters, latest=latest).count()
            return ServiceResult(ok=True, op="count_definitions", data={"count": total})

        return self._guard("count_definitions", run)

    # ------------------------------------------------------------------
    # get_definition
    # ------------------------------------------------------------------

    def get_definition(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        latest: bool = False,
    ) -> ServiceResult:
        """Fetch the single definition matching *filters*.

        Fails with ``NOT_FOUND`` for no match and ``AMBIGUOUS_RESULT`` for
        more than one.
        """

        def run() -> ServiceResult:
            definition = self._build(filters, latest=latest).single_result()
            if definition is None:
                return ServiceResult.failure(
                    "get_definition",
                    "NOT_FOUND",
                    "No definition matches the given filters",
                    filters=dict(filters or {}),
                )
            data = definition.model_dump()
            data["message_subscriptions"] = list(
                self._store.definitions.subscription_names(definition.id)
            )
            return ServiceResult(ok=True, op="get_definition", data=data)

        return self._guard("get_definition", run)

    # ------------------------------------------------------------------
    # native_query
    # ------------------------------------------------------------------

    def native_query(
        self,
        sql: str,
        parameters: Mapping[str, Any] | None = None,
        *,
        first_result: int = 0,
        max_results: int | None = None,
    ) -> ServiceResult:
        """Run a native SQL template.

        Paging is pushed into the SQL when *max_results* is given; a bare
        *first_result* skips rows of the full result instead.
        """

        def run() -> ServiceResult:
            query = self._store.create_native_definition_query().sql(sql)
            for name, value in (parameters or {}).items():
                query.parameter(name, value)
            paging = make_paging(first_result, max_results)
            if paging.max_results is not None:
                rows = query.list_page(paging.first_result, paging.max_results)
            else:
                rows = query.list()[paging.first_result :]
            items = [d.model_dump() for d in rows]
            log.debug("definitions.native", count=len(items))
            return ServiceResult(
                ok=True,
                op="native_query",
                data={"count": len(items), "items": items},
            )

        return self._guard("native_query", run)
