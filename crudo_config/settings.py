"""
Loader settings (``crudo_config.settings``).

Settings are resolved once at process start from two layers, later layers
winning:

1. an optional YAML file (keys are the ``LoaderSettings`` field names), taken
   from ``config_file`` or the ``CRUDO_CONFIG_FILE`` environment variable;
2. environment variables (``DB_HOST``, ``DB_TABLE``, ``DATE_COLUMN``, ...).

The result is a frozen dataclass; nothing downstream re-reads the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml
from sqlalchemy.engine import URL, make_url

_logger = logging.getLogger("crudo.config")

CONFIG_FILE_ENV = "CRUDO_CONFIG_FILE"

# Environment variable -> LoaderSettings field
_ENV_FIELDS: dict[str, str] = {
    "DB_DRIVER": "db_driver",
    "DB_HOST": "db_host",
    "DB_PORT": "db_port",
    "DB_USER": "db_user",
    "DB_PASSWORD": "db_password",
    "DB_NAME": "db_name",
    "DB_TABLE": "db_table",
    "DATABASE_URL": "database_url_override",
    "DATE_COLUMN": "date_column",
    "INVALID_DATE_SENTINEL": "invalid_date_sentinel",
    "PREVIEW_LIMIT": "preview_limit",
}

_INT_FIELDS = frozenset({"db_port", "preview_limit"})


@dataclass(frozen=True)
class LoaderSettings:
    """Process configuration for the loader. Immutable once resolved."""

    db_driver: str = "mysql+pymysql"
    db_host: str | None = None
    db_port: int | None = None
    db_user: str | None = None
    db_password: str | None = None
    db_name: str = "corven"
    db_table: str = "crudo_ap"
    database_url_override: str | None = None
    date_column: str = "FechaDoc"
    invalid_date_sentinel: str = "0000-00-00"
    preview_limit: int = 100

    def database_url(self) -> URL:
        """SQLAlchemy URL for the destination store.

        ``DATABASE_URL`` wins over the individual ``DB_*`` parts when set.
        """
        if self.database_url_override:
            return make_url(self.database_url_override)
        return URL.create(
            drivername=self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    def redacted(self) -> dict[str, Any]:
        """Settings as a dict safe to log (password masked)."""
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        if out.get("db_password"):
            out["db_password"] = "***"
        if out.get("database_url_override"):
            out["database_url_override"] = make_url(
                out["database_url_override"]
            ).render_as_string(hide_password=True)
        return out


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML settings file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in _INT_FIELDS:
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"Setting {name} must be an integer, got {value!r}") from None
    return str(value)


def _from_mapping(base: LoaderSettings, data: Mapping[str, Any]) -> LoaderSettings:
    known = {f.name for f in fields(LoaderSettings)}
    updates: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            _logger.warning("settings_unknown_key", extra={"key": key})
            continue
        updates[key] = _coerce(key, value)
    return replace(base, **updates)


def get_settings(
    environ: Mapping[str, str] | None = None,
    config_file: Path | None = None,
) -> LoaderSettings:
    """The single settings entrypoint.

    Args:
        environ: Environment mapping (defaults to ``os.environ``).
        config_file: Optional YAML file; falls back to ``CRUDO_CONFIG_FILE``.

    Returns:
        The resolved, frozen ``LoaderSettings``.
    """
    env = os.environ if environ is None else environ
    settings = LoaderSettings()

    path = config_file
    if path is None and env.get(CONFIG_FILE_ENV):
        path = Path(env[CONFIG_FILE_ENV])
    if path is not None:
        settings = _from_mapping(settings, load_yaml_file(path))

    env_values = {
        field_name: env[var]
        for var, field_name in _ENV_FIELDS.items()
        if var in env and env[var] != ""
    }
    settings = _from_mapping(settings, env_values)

    _logger.info("settings_resolved", extra={"settings": settings.redacted()})
    return settings
