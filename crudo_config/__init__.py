"""
crudo_config -- single public entrypoint for loader configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_settings()``.  Pipeline code never reads environment variables
    directly; the resolved ``LoaderSettings`` is passed explicitly into the
    engine factory, the orchestrator and the services at construction time.

Failure modes:
    - ``FileNotFoundError`` -- ``config_file`` (or ``CRUDO_CONFIG_FILE``) points
      to a missing file.
    - ``yaml.YAMLError`` -- the config file is not valid YAML.
    - ``ValueError`` -- a numeric setting is not an integer, or the YAML
      document is not a mapping.
"""

from __future__ import annotations

from crudo_config.settings import (
    CONFIG_FILE_ENV,
    LoaderSettings,
    get_settings,
    load_yaml_file,
)

__all__ = [
    "CONFIG_FILE_ENV",
    "LoaderSettings",
    "get_settings",
    "load_yaml_file",
]
