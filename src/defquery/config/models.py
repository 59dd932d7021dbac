"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, defquery.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    # None: SQLite file under {root}/.defquery/
    url: str | None = None
    echo: bool = False


class QueryConfig(BaseModel):
    """[query] section."""

    model_config = {"frozen": True}

    # Applied by the CLI when --max is not given; None lists everything.
    default_max_results: int | None = Field(default=None, ge=0)

