"""Rich Console factory and theme for defquery output.

Consoles render to a StringIO buffer so renderers keep a plain
``-> str`` contract. In non-TTY environments (tests, pipes) Rich drops
color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFQUERY_THEME = Theme(
    {
        "dq.ok": "bold green",
        "dq.error": "bold red",
        "dq.op": "bold cyan",
        "dq.key": "dim",
        "dq.id": "bold blue",
        "dq.name": "bold",
        "dq.version": "magenta",
        "dq.deployment": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=DEFQUERY_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
