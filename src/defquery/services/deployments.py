"""DeploymentService — deploy manifests, delete deployments, list them.

Manifests are TOML files::

    name = "invoicing"
    category = "finance"

    [[definitions]]
    key = "invoice"
    name = "Invoice approval"
    category = "Examples"
    message_subscriptions = ["newInvoiceMessage"]
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from defquery.domain.definitions import DeploymentManifest
from defquery.services.base import BaseService
from defquery.services.result import ServiceResult

log = structlog.get_logger(__name__)


class DeploymentService(BaseService):
    """Write side of the store, plus a deployment listing."""

    def deploy(self, manifest: DeploymentManifest) -> ServiceResult:
        """Persist *manifest* as a new deployment."""

        def run() -> ServiceResult:
            deployment, definitions = self._store.deployments.deploy(manifest)
            log.info("deployment.created", id=deployment.id, definitions=len(definitions))
            return ServiceResult(
                ok=True,
                op="deploy",
                data={
                    **deployment.model_dump(),
                    "definitions": [d.model_dump() for d in definitions],
                },
            )

        return self._guard("deploy", run)

    def deploy_manifest(self, path: Path, *, name: str | None = None) -> ServiceResult:
        """Read a TOML manifest from *path* and deploy it.

        *name* overrides the manifest's own ``name``.
        """
        try:
            data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            return ServiceResult.failure(
                "deploy", "INVALID_MANIFEST", f"Cannot read manifest {path}: {exc}"
            )
        if name is not None:
            data["name"] = name
        try:
            manifest = DeploymentManifest.model_validate(data)
        except ValidationError as exc:
            return ServiceResult.failure(
                "deploy",
                "INVALID_MANIFEST",
                f"Invalid manifest {path}",
                errors=[err["msg"] for err in exc.errors()],
            )
        return self.deploy(manifest)

    def undeploy(self, deployment_id: str) -> ServiceResult:
        """Delete a deployment and, by cascade, its definitions."""

        def run() -> ServiceResult:
            owned = self._store.create_definition_query().deployment_id(deployment_id).count()
            if not self._store.deployments.delete(deployment_id):
                return ServiceResult.failure(
                    "delete_deployment",
                    "NOT_FOUND",
                    f"No deployment with id {deployment_id}",
                )
            log.info("deployment.deleted", id=deployment_id, definitions=owned)
            return ServiceResult(
                ok=True,
                op="delete_deployment",
                data={"id": deployment_id, "deleted_definitions": owned},
            )

        return self._guard("delete_deployment", run)

    def list_deployments(self) -> ServiceResult:
        def run() -> ServiceResult:
            items: list[dict[str, Any]] = []
            for deployment in self._store.deployments.list():
                item = deployment.model_dump()
                item["definitions"] = (
                    self._store.create_definition_query().deployment_id(deployment.id).count()
                )
                items.append(item)
            return ServiceResult(
                ok=True,
                op="list_deployments",
                data={"count": len(items), "items": items},
            )

        return self._guard("list_deployments", run)
