"""Definition and deployment models.

Definitions are immutable once deployed. A deployment introduces one
definition per distinct key in its manifest; each new definition gets the
next version for its key. Ids are assigned by the deployment boundary.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


def make_definition_id(key: str, version: int, deployment_id: str) -> str:
    """Build the store id for a definition.

    Examples:
        >>> make_definition_id("invoice", 3, "DEP-0007")
        'invoice:3:DEP-0007'
    """
    return f"{key}:{version}:{deployment_id}"


class Definition(BaseModel):
    """A single version of a process definition."""

    model_config = {"frozen": True}

    id: str
    key: str
    name: str | None = None
    category: str | None = None
    version: int = Field(ge=1)
    deployment_id: str
    description: str | None = None


class Deployment(BaseModel):
    """A persisted deployment owning one or more definitions."""

    model_config = {"frozen": True}

    id: str
    name: str | None = None
    category: str | None = None
    deployed_at: str


class DefinitionSpec(BaseModel):
    """Definition metadata as declared in a deployment manifest."""

    model_config = {"frozen": True}

    key: str = Field(min_length=1)
    name: str | None = None
    category: str | None = None
    description: str | None = None
    message_subscriptions: list[str] = Field(default_factory=list)


class DeploymentManifest(BaseModel):
    """Manifest accepted by the deployment boundary.

    Keys must be unique within a manifest: a deployment contributes at
    most one new version per key.
    """

    model_config = {"frozen": True}

    name: str | None = None
    category: str | None = None
    definitions: list[DefinitionSpec] = Field(min_length=1)

    @field_validator("definitions")
    @classmethod
    def _unique_keys(cls, value: list[DefinitionSpec]) -> list[DefinitionSpec]:
        seen: set[str] = set()
        for spec in value:
            if spec.key in seen:
                msg = f"Duplicate definition key in manifest: {spec.key!r}"
                raise ValueError(msg)
            seen.add(spec.key)
        return value
