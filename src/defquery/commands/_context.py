"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. The store is opened lazily so ``--help`` and
``--version`` never touch the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from defquery.config.logging import configure_logging
from defquery.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from defquery.config.settings import DefquerySettings
    from defquery.infrastructure.store import Store
    from defquery.services.result import ServiceResult


class AppContext:
    """Settings plus a lazily opened :class:`Store`."""

    def __init__(self, settings: DefquerySettings) -> None:
        self.settings = settings
        self._store: Store | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> Store:
        """The store instance (opened on first access)."""
        if self._store is None:
            from defquery.infrastructure.store import Store

            self._store = Store(self.settings)
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout, returns normally. Warnings go to
          stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
