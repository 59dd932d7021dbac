"""Read and write repositories over the definition store."""

from defquery.infrastructure.repositories.definitions import DefinitionQueryRepository
from defquery.infrastructure.repositories.deployments import DeploymentRepository
from defquery.infrastructure.repositories.native import NativeDefinitionQuery, render_template
from defquery.infrastructure.repositories.versions import latest_versions

__all__ = [
    "DefinitionQueryRepository",
    "DeploymentRepository",
    "NativeDefinitionQuery",
    "latest_versions",
    "render_template",
]
