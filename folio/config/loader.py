# folio/config/loader.py
"""
Layered configuration loading for the Folio streamer.

This module implements the config merge strategy:
    1. Package defaults (folio/config/defaults/streamer.yaml) - always loaded
    2. User config (explicit path, or $FOLIO_CONFIG) - overrides defaults

Usage:
    from folio.config.loader import load_streamer_config

    config = load_streamer_config()
    streamer = Streamer.from_config(config)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from folio.config.schema import StreamerConfig
from folio.core.exceptions import ConfigError
from folio.logging.logger import get_logger
from folio.logging.tags import CONFIG

logger = get_logger(__name__)

CONFIG_ENV_VAR = "FOLIO_CONFIG"
CONFIG_KEY = "streamer"
DEFAULTS_PATH = Path(__file__).parent / "defaults" / "streamer.yaml"


# =============================================================================
# Deep Merge
# =============================================================================


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Values from `override` take precedence over `base`.
    Nested dicts are merged recursively.
    Lists are replaced entirely (not merged).

    Examples:
        >>> deep_merge({"a": 1, "b": {"c": 2, "d": 3}}, {"b": {"c": 10}})
        {'a': 1, 'b': {'c': 10, 'd': 3}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


# =============================================================================
# Loading Functions
# =============================================================================


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(raw).__name__}")
    # Configs may be nested under the "streamer" key or flat
    section = raw.get(CONFIG_KEY, raw)
    if not isinstance(section, dict):
        raise ConfigError(f"'{CONFIG_KEY}' in {path} must be a mapping")
    return section


def load_defaults() -> dict[str, Any]:
    """Load the package defaults."""
    return _read_yaml(DEFAULTS_PATH)


def resolve_user_config_path(path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Explicit path first, then $FOLIO_CONFIG."""
    if path is not None:
        return Path(path)
    env = os.environ.get(CONFIG_ENV_VAR)
    return Path(env) if env else None


def load_user_config(path: Optional[Union[str, Path]] = None) -> Optional[dict[str, Any]]:
    """
    Load the user configuration, if any.

    Raises:
        ConfigError: If the file does not exist or is not valid YAML.
    """
    user_path = resolve_user_config_path(path)
    if user_path is None:
        return None

    if not user_path.exists():
        raise ConfigError(f"Config file not found: {user_path}")

    try:
        config = _read_yaml(user_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {user_path}: {e}") from e

    logger.debug(f"{CONFIG} Loaded user config from {user_path}")
    return config


def load_streamer_config(path: Optional[Union[str, Path]] = None) -> StreamerConfig:
    """
    Load the complete streamer configuration.

    Merge order:
        1. Package defaults
        2. User config (`path`, or $FOLIO_CONFIG) - overrides defaults

    Raises:
        ConfigError: If the user config cannot be read or does not validate.
    """
    merged = load_defaults()

    user_config = load_user_config(path)
    if user_config is not None:
        merged = deep_merge(merged, user_config)
        logger.debug(f"{CONFIG} Merged config: defaults + user overrides")

    try:
        return StreamerConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid streamer configuration: {e}") from e


__all__ = [
    "CONFIG_ENV_VAR",
    "deep_merge",
    "load_defaults",
    "load_user_config",
    "load_streamer_config",
    "resolve_user_config_path",
]
