"""Standalone commands: deploy, undeploy, and list deployments."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from defquery.commands._base import DefqueryCommand
from defquery.services.deployments import DeploymentService

if TYPE_CHECKING:
    from defquery.commands._context import AppContext


@click.command(
    cls=DefqueryCommand,
    examples=(
        ("Deploy a manifest", "defquery deploy invoicing.toml"),
        ("Override the deployment name", "defquery deploy invoicing.toml --name invoicing-2026-10"),
        ("Show the assigned ids as JSON", "defquery --json deploy invoicing.toml"),
    ),
)
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", default=None, help="Override the manifest's deployment name.")
@click.pass_obj
def deploy(app: AppContext, manifest: Path, name: str | None) -> None:
    """Deploy the definitions declared in a TOML MANIFEST."""
    app.emit(DeploymentService(app.store).deploy_manifest(manifest, name=name))


@click.command(
    cls=DefqueryCommand,
    examples=(("Remove a deployment and its definitions", "defquery undeploy DEP-0002"),),
)
@click.argument("deployment_id")
@click.pass_obj
def undeploy(app: AppContext, deployment_id: str) -> None:
    """Delete a deployment together with its definitions."""
    app.emit(DeploymentService(app.store).undeploy(deployment_id))


@click.command(
    cls=DefqueryCommand,
    examples=(
        ("Table of deployments", "defquery deployments"),
        ("Deployment ids only", "defquery -q deployments"),
    ),
)
@click.pass_obj
def deployments(app: AppContext) -> None:
    """List deployments with their definition counts."""
    app.emit(DeploymentService(app.store).list_deployments())
