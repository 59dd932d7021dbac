"""Root CLI group for defquery with global flags and command registration."""

from __future__ import annotations

import click

from defquery import __version__
from defquery.commands import register_commands
from defquery.commands._context import AppContext
from defquery.config.settings import ConfigError, DefquerySettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="defquery")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--db", "database_url", default=None, help="Database URL (overrides config).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    database_url: str | None,
) -> None:
    """defquery — query versioned process definitions."""
    try:
        settings = DefquerySettings.from_cli(
            config_path=config_path,
            database_url=database_url,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
