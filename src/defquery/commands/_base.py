"""Click base classes that carry described usage examples.

Commands declare ``examples`` as ``(description, invocation)`` pairs.
``--examples`` prints them and exits; ``--help`` stays short and only
points at the flag.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

Example = tuple[str, str]


class ExamplesMixin:
    """Adds an eager ``--examples`` flag to a Click command or group."""

    examples: tuple[Example, ...]
    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: Sequence[Example] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show sample invocations and exit.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':")
        for description, invocation in self.examples:
            click.echo(f"\n  {description}\n    $ {invocation}")
        ctx.exit(0)

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)  # type: ignore[misc]
        if self.examples:
            formatter.write_paragraph()
            formatter.write_text("Run with --examples to see sample invocations.")


class DefqueryCommand(ExamplesMixin, click.Command):
    """Command with ``--examples`` support."""


class DefqueryGroup(ExamplesMixin, click.Group):
    """Group whose subcommands are ``DefqueryCommand`` by default."""

    command_class = DefqueryCommand
