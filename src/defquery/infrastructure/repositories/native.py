"""Native definition queries — raw SQL with ``#{name}`` placeholders.

An escape hatch around the criteria API. The template is opaque: it is
not parsed or validated here, and a malformed template fails inside the
store with a SQLAlchemy error that reaches the caller unchanged.

Placeholders are rewritten into bound parameters of a ``text()`` clause,
so caller values always travel through the driver's parameter binding
and are never spliced into the SQL text. Any literal ``:`` already in the
template is escaped first so SQLAlchemy cannot mistake it for a bind.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from sqlalchemy import TextClause, text
from sqlalchemy.engine import Engine

from defquery.domain.criteria import make_paging
from defquery.domain.definitions import Definition
from defquery.domain.errors import AmbiguousResultError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"#\{\s*(\w+)\s*\}")

_FIRST_PARAM = "native_first_result"
_MAX_PARAM = "native_max_results"


def render_template(template: str) -> tuple[str, list[str]]:
    """Translate ``#{name}`` placeholders into ``:name`` bind markers.

    Returns the rewritten SQL and the placeholder names in order of
    appearance (duplicates kept).

    Examples:
        >>> render_template("SELECT * FROM t WHERE k = #{key}")
        ('SELECT * FROM t WHERE k = :key', ['key'])
        >>> render_template("SELECT '12:30' AS t")
        ("SELECT '12\\\\:30' AS t", [])
    """
    names: list[str] = []

    def _bind(match: re.Match[str]) -> str:
        names.append(match.group(1))
        return f":{match.group(1)}"

    escaped = template.replace(":", "\\:")
    return _PLACEHOLDER.sub(_bind, escaped), names


class NativeDefinitionQuery:
    """Builder and executor for one raw SQL query over definitions.

    Rows are mapped onto :class:`Definition` by column name, so the
    template must select the ``process_definitions`` columns.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sql: str | None = None
        self._parameters: dict[str, Any] = {}

    def sql(self, template: str) -> NativeDefinitionQuery:
        self._sql = template
        return self

    def parameter(self, name: str, value: Any) -> NativeDefinitionQuery:
        """Bind *value* to ``#{name}``; rebinding a name overwrites it."""
        self._parameters[name] = value
        return self

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._parameters)

    def _statement(self, wrapper: str | None = None) -> TextClause:
        rendered, names = render_template(self._sql or "")
        if wrapper is not None:
            rendered = wrapper.format(sql=rendered)
        logger.debug("Native query %r with placeholders %s", rendered, names)
        return text(rendered)

    def _fetch(self, stmt: TextClause, params: dict[str, Any]) -> Sequence[Definition]:
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, params).mappings().all()
        return [Definition.model_validate(dict(row)) for row in rows]

    def list(self) -> Sequence[Definition]:
        """Execute the template and map every row."""
        return self._fetch(self._statement(), self._parameters)

    def list_page(self, first_result: int, max_results: int) -> Sequence[Definition]:
        """Execute with ``OFFSET first_result LIMIT max_results`` applied.

        Raises:
            InvalidArgumentError: A bound is negative or not an integer.
        """
        paging = make_paging(first_result, max_results)
        stmt = self._statement(
            "SELECT * FROM ({sql}) AS native_page "
            f"LIMIT :{_MAX_PARAM} OFFSET :{_FIRST_PARAM}"
        )
        params = {**self._parameters, _FIRST_PARAM: paging.first_result, _MAX_PARAM: max_results}
        return self._fetch(stmt, params)

    def single_result(self) -> Definition | None:
        """The only row, or None.

        Raises:
            AmbiguousResultError: The template returned more than one row.
        """
        stmt = self._statement(f"SELECT * FROM ({{sql}}) AS native_single LIMIT :{_MAX_PARAM}")
        rows = self._fetch(stmt, {**self._parameters, _MAX_PARAM: 2})
        if len(rows) > 1:
            msg = "Native query returned more than one result"
            raise AmbiguousResultError(msg)
        return rows[0] if rows else None

    def count(self) -> int:
        """Number of rows the template returns."""
        stmt = self._statement("SELECT COUNT(*) FROM ({sql}) AS native_count")
        with self._engine.connect() as conn:
            return int(conn.execute(stmt, self._parameters).scalar_one() or 0)
