"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from defquery.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from defquery.services.result import ServiceResult

_Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: ids for listings, one status line otherwise."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        ids = [str(item["id"]) for item in items if isinstance(item, dict) and "id" in item]
        return "\n".join(ids)
    if result.op == "count_definitions":
        return str(result.data.get("count", 0))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="dq.ok"), Text(f"  {result.op}", style="dq.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="dq.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="dq.id")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v)


def _definition_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="dq.id", no_wrap=True)
    table.add_column("Key")
    table.add_column("Version", style="dq.version", justify="right")
    table.add_column("Name", style="dq.name")
    table.add_column("Category")
    table.add_column("Deployment", style="dq.deployment")
    if verbose:
        table.add_column("Description", style="dim")

    for item in items:
        row = [
            str(item.get("id", "")),
            str(item.get("key", "")),
            str(item.get("version", "")),
            str(item.get("name") or ""),
            str(item.get("category") or ""),
            str(item.get("deployment_id", "")),
        ]
        if verbose:
            row.append(str(item.get("description") or ""))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="dq.error"),
        Text(f"  {result.op}{code}", style="dq.op"),
        Text(" — "),
        msg,
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Definition renderers ──────────────────────────────────────────────


def _render_definitions(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_definitions and native_query results as a table."""
    items = result.data.get("items", [])
    console.print(_definition_table(items, verbose=verbose))
    summary = f"\n{result.data.get('count', len(items))} definitions"
    total = result.data.get("total")
    if total is not None and total != len(items):
        summary += f" (of {total})"
    console.print(summary)


def _render_definition(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "key", "version", "name", "category", "deployment_id"):
        _field(console, key, result.data.get(key))
    subscriptions = result.data.get("message_subscriptions") or []
    if subscriptions:
        _field(console, "message_subscriptions", ", ".join(subscriptions))
    if verbose and result.data.get("description"):
        _field(console, "description", result.data["description"])


def _render_count(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "count", result.data.get("count", 0))


# ── Deployment renderers ──────────────────────────────────────────────


def _render_deploy(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "name", "deployed_at"):
        _field(console, key, result.data.get(key))
    definitions = result.data.get("definitions", [])
    console.print()
    console.print(_definition_table(definitions, verbose=verbose))


def _render_deployments(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="dq.id", no_wrap=True)
    table.add_column("Name", style="dq.name")
    table.add_column("Category")
    table.add_column("Definitions", justify="right")
    table.add_column("Deployed", style="dim")
    for item in result.data.get("items", []):
        table.add_row(
            str(item.get("id", "")),
            str(item.get("name") or ""),
            str(item.get("category") or ""),
            str(item.get("definitions", 0)),
            str(item.get("deployed_at", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', 0)} deployments")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose and result.meta:
        console.print(Text("  meta:", style="dim"))
        for k, v in result.meta.items():
            console.print(f"    {k}: {v}")


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, _Renderer] = {
    "list_definitions": _render_definitions,
    "native_query": _render_definitions,
    "get_definition": _render_definition,
    "count_definitions": _render_count,
    "deploy": _render_deploy,
    "list_deployments": _render_deployments,
    "delete_deployment": _render_generic,
}
