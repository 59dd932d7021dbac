"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DEFQUERY_*`` prefix, ``__`` for nested sections
  3. TOML file    — chosen by :func:`defquery.config.discovery.locate_config`
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from defquery.config.discovery import ConfigError, locate_config, read_config
from defquery.config.models import DatabaseConfig, QueryConfig

__all__ = ["ConfigError", "DefquerySettings", "TomlSettingsSource"]

DATA_DIRNAME = ".defquery"
DB_FILENAME = "defquery.db"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings read from the located ``defquery.toml``, if any."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = read_config(toml_path) if toml_path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DefquerySettings(BaseSettings):
    """Unified settings for the defquery CLI and library.

    Attributes:
        root: Project directory (parent of ``defquery.toml``, or CWD if no
            config was found). The default SQLite database lives under it.
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DEFQUERY_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)

    @property
    def database_url(self) -> str:
        """Configured URL, or a SQLite file under ``{root}/.defquery/``."""
        if self.database.url:
            return self.database.url
        return f"sqlite:///{self.root / DATA_DIRNAME / DB_FILENAME}"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        database_url: str | None = None,
        **cli_flags: Any,
    ) -> DefquerySettings:
        """Construct settings from a CLI invocation.

        Resolves *root* from the located config file's parent directory and
        merges CLI flags as highest-priority overrides. *database_url*
        overrides only the ``[database] url`` key.

        Raises:
            ConfigError: *config_path* is missing or the TOML is invalid.
        """
        toml_path = locate_config(config_path, root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            settings = cls(root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

        if database_url:
            database = settings.database.model_copy(update={"url": database_url})
            settings = settings.model_copy(update={"database": database})
        return settings
