"""
Configuration loader — reads ui-build.yml into a BuildConfig.

The file is optional: without one, every setting takes its default and
the project root is the current directory. When present it is validated
against the pydantic model and paths resolve against its directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError

from uibundle.core.errors import ConfigError
from uibundle.core.models.config import BuildConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "ui-build.yml"

__all__ = ["CONFIG_FILE", "ConfigError", "find_config_file", "load_config", "sourcemaps_enabled"]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for ui-build.yml starting from ``start_dir``, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None, *, search: bool = True) -> BuildConfig:
    """Load and validate the build configuration.

    Args:
        path: Explicit config path. When None, searches upward (if ``search``).
        search: Whether to look for a config file when ``path`` is None.

    Raises:
        ConfigError: If an explicit path is missing or any file is invalid.
    """
    if path is None and search:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return BuildConfig(root=Path.cwd().resolve())

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = BuildConfig.model_validate({**data, "root": path.parent.resolve()})
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration in {path}: {e}") from e

    logger.info("Loaded build config from %s (bundle '%s')", path, config.bundle_name)
    return config


def sourcemaps_enabled(
    config: BuildConfig, *, preview: bool = False, env: Mapping[str, str] | None = None
) -> bool:
    """Source maps are on for preview builds, or when SOURCEMAPS=true."""
    env = os.environ if env is None else env
    return preview or config.sourcemaps or env.get("SOURCEMAPS") == "true"
