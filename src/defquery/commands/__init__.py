"""Subcommand modules for defquery.

Provides register_commands() which uses deferred imports to keep
``defquery --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command group and standalone commands on the root group."""
    from defquery.commands.definitions import definitions

    cli.add_command(definitions)

    from defquery.commands.deploy import deploy, deployments, undeploy
    from defquery.commands.native import native

    cli.add_command(native)
    cli.add_command(deploy)
    cli.add_command(undeploy)
    cli.add_command(deployments)
