"""Command group: list, count, and fetch process definitions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import click

from defquery.commands._base import DefqueryGroup
from defquery.services.definitions import DefinitionService

if TYPE_CHECKING:
    from defquery.commands._context import AppContext

_F = TypeVar("_F", bound=Callable[..., Any])

# CLI option name -> DefinitionService filter name
_OPTION_FILTERS: dict[str, str] = {
    "key": "key",
    "key_like": "key_like",
    "name": "name",
    "name_like": "name_like",
    "category": "category",
    "category_like": "category_like",
    "version": "version",
    "min_version": "version_greater_than_or_equals",
    "max_version": "version_lower_than_or_equals",
    "deployment_id": "deployment_id",
    "message_subscription": "message_subscription",
}

_DEFINITIONS_EXAMPLES = (
    ("List every deployed definition", "defquery definitions list"),
    (
        "Newest version of each key, by key",
        "defquery definitions list --latest --sort key",
    ),
    ("Count by category pattern", "defquery definitions count --category-like '%Example%'"),
    ("Fetch the current invoice process", "defquery definitions get --key invoice --latest"),
)


def _filter_options(func: _F) -> _F:
    """Attach the shared definition filter options to a command."""
    options = [
        click.option("--id", "ids", multiple=True, help="Definition id (repeatable)."),
        click.option("--key", default=None, help="Exact key."),
        click.option("--key-like", default=None, help="Key LIKE pattern (% and _ wildcards)."),
        click.option("--name", default=None, help="Exact name."),
        click.option("--name-like", default=None, help="Name LIKE pattern."),
        click.option("--category", default=None, help="Exact category."),
        click.option("--category-like", default=None, help="Category LIKE pattern."),
        click.option("--version", type=int, default=None, help="Exact version."),
        click.option("--min-version", type=int, default=None, help="Version at least."),
        click.option("--max-version", type=int, default=None, help="Version at most."),
        click.option("--deployment-id", default=None, help="Owning deployment id."),
        click.option(
            "--message-subscription",
            default=None,
            help="Only definitions subscribing to this message.",
        ),
        click.option("--latest", is_flag=True, default=False, help="Latest version per key only."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect_filters(ids: tuple[str, ...], options: dict[str, Any]) -> dict[str, Any]:
    filters = {
        _OPTION_FILTERS[name]: value for name, value in options.items() if value is not None
    }
    if ids:
        filters["definition_ids"] = set(ids)
    return filters


@click.group(cls=DefqueryGroup, examples=_DEFINITIONS_EXAMPLES)
def definitions() -> None:
    """Query deployed process definitions."""


@definitions.command(
    name="list",
    examples=(
        (
            "Keys starting with inv, newest only",
            "defquery definitions list --key-like 'inv%' --latest",
        ),
        (
            "Key ascending, then newest version first",
            "defquery definitions list --sort key:asc --sort version:desc",
        ),
        ("Second page of ten", "defquery definitions list --first 10 --max 10"),
        ("Machine-readable output", "defquery --json definitions list --category Examples"),
    ),
)
@_filter_options
@click.option(
    "--sort",
    "sort",
    multiple=True,
    help="Sort key as field[:asc|desc]; repeat for multi-key sorts.",
)
@click.option(
    "--first", "first_result", type=click.IntRange(min=0), default=0, help="Rows to skip."
)
@click.option(
    "--max", "max_results", type=click.IntRange(min=0), default=None, help="Max rows to return."
)
@click.pass_obj
def list_cmd(
    app: AppContext,
    ids: tuple[str, ...],
    latest: bool,
    sort: tuple[str, ...],
    first_result: int,
    max_results: int | None,
    **options: Any,
) -> None:
    """List definitions matching the filters."""
    result = DefinitionService(app.store).list_definitions(
        _collect_filters(ids, options),
        latest=latest,
        sort=sort,
        first_result=first_result,
        max_results=max_results,
    )
    app.emit(result)


@definitions.command(
    examples=(
        ("Count everything", "defquery definitions count"),
        ("Versions of one key", "defquery definitions count --key invoice"),
        ("Number of distinct keys, bare", "defquery -q definitions count --latest"),
    )
)
@_filter_options
@click.pass_obj
def count(app: AppContext, ids: tuple[str, ...], latest: bool, **options: Any) -> None:
    """Count definitions matching the filters."""
    result = DefinitionService(app.store).count_definitions(
        _collect_filters(ids, options), latest=latest
    )
    app.emit(result)


@definitions.command(
    examples=(
        ("By id", "defquery definitions get --id invoice:2:DEP-0002"),
        ("Newest version of a key", "defquery definitions get --key invoice --latest"),
        ("A specific version", "defquery definitions get --key invoice --version 1"),
    )
)
@_filter_options
@click.pass_obj
def get(app: AppContext, ids: tuple[str, ...], latest: bool, **options: Any) -> None:
    """Fetch the single definition matching the filters."""
    result = DefinitionService(app.store).get_definition(
        _collect_filters(ids, options), latest=latest
    )
    app.emit(result)
