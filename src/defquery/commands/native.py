"""Standalone command: run a native SQL query over definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from defquery.commands._base import DefqueryCommand
from defquery.services.definitions import DefinitionService

if TYPE_CHECKING:
    from defquery.commands._context import AppContext


def _parse_parameters(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    parameters: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition("=")
        if not sep or not name:
            msg = f"Expected name=value, got {raw!r}"
            raise click.BadParameter(msg)
        parameters[name] = value
    return parameters


@click.command(
    cls=DefqueryCommand,
    examples=(
        ("Every definition", 'defquery native "SELECT * FROM process_definitions"'),
        (
            "Bind a placeholder",
            'defquery native "SELECT * FROM process_definitions WHERE key LIKE #{key}" -p key=%o%',
        ),
        (
            "Page through the result",
            'defquery native "SELECT * FROM process_definitions ORDER BY id" --first 1 --max 2',
        ),
    ),
)
@click.argument("sql")
@click.option(
    "-p",
    "--param",
    "parameters",
    multiple=True,
    callback=_parse_parameters,
    help="Bind #{name} placeholders as name=value (repeatable).",
)
@click.option(
    "--first", "first_result", type=click.IntRange(min=0), default=0, help="Rows to skip."
)
@click.option(
    "--max", "max_results", type=click.IntRange(min=0), default=None, help="Max rows to return."
)
@click.pass_obj
def native(
    app: AppContext,
    sql: str,
    parameters: dict[str, str],
    first_result: int,
    max_results: int | None,
) -> None:
    """Run raw SQL with #{name} placeholders; rows must be definitions."""
    result = DefinitionService(app.store).native_query(
        sql,
        parameters,
        first_result=first_result,
        max_results=max_results,
    )
    app.emit(result)
