"""Deployment boundary — persists manifests and deletes deployments.

Stands in for the external deployment pipeline so the query layer has
facts to read. A deployment assigns each definition in its manifest the
next version for that definition's key, inside one transaction together
with the deployment row and the definition's message subscriptions.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine

from defquery.domain.definitions import (
    Definition,
    Deployment,
    DeploymentManifest,
    make_definition_id,
)
from defquery.infrastructure.database.counters import next_sequential_id
from defquery.infrastructure.database.schema import (
    deployments,
    message_subscriptions,
    process_definitions,
)

logger = logging.getLogger(__name__)


class DeploymentRepository:
    """Writes deployments and their definitions; reads deployment rows."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def deploy(self, manifest: DeploymentManifest) -> tuple[Deployment, list[Definition]]:
        """Persist *manifest* as a new deployment.

        Returns the deployment and the definitions it introduced, in
        manifest order.
        """
        created: list[Definition] = []
        with self._engine.begin() as conn:
            deployment = Deployment(
                id=next_sequential_id(conn, "DEP-"),
                name=manifest.name,
                category=manifest.category,
                deployed_at=datetime.now(UTC).isoformat(),
            )
            conn.execute(insert(deployments).values(**deployment.model_dump()))

            for spec in manifest.definitions:
                current = conn.execute(
                    select(func.max(process_definitions.c.version)).where(
                        process_definitions.c["key"] == spec.key
                    )
                ).scalar_one()
                version = (current or 0) + 1
                definition = Definition(
                    id=make_definition_id(spec.key, version, deployment.id),
                    key=spec.key,
                    name=spec.name,
                    category=spec.category,
                    version=version,
                    deployment_id=deployment.id,
                    description=spec.description,
                )
                conn.execute(insert(process_definitions).values(**definition.model_dump()))
                for subscription in sorted(set(spec.message_subscriptions)):
                    conn.execute(
                        insert(message_subscriptions).values(
                            definition_id=definition.id, name=subscription
                        )
                    )
                created.append(definition)

        logger.debug(
            "Deployed %s with %d definition(s): %s",
            deployment.id,
            len(created),
            ", ".join(d.id for d in created),
        )
        return deployment, created

    def delete(self, deployment_id: str) -> bool:
        """Delete a deployment; its definitions go with it.

        Returns False when no such deployment exists.
        """
        with self._engine.begin() as conn:
            result = conn.execute(delete(deployments).where(deployments.c.id == deployment_id))
        removed = bool(result.rowcount)
        logger.debug("Delete deployment %s: removed=%s", deployment_id, removed)
        return removed

    def get(self, deployment_id: str) -> Deployment | None:
        stmt = select(deployments).where(deployments.c.id == deployment_id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return Deployment.model_validate(dict(row)) if row is not None else None

    def list(self) -> Sequence[Deployment]:
        """All deployments, oldest first."""
        stmt = select(deployments).order_by(deployments.c.id)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [Deployment.model_validate(dict(row)) for row in rows]
