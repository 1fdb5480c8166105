"""Configuration loader for the kitty registry

All configurable values come from config/config.yaml.
No magic numbers in code - everything is configurable.

Configuration is validated at load time using Pydantic.
Typos and invalid values fail fast with clear error messages.

The KITTIES_CONFIG environment variable overrides the default path.

Usage:
    from src.config import load_config, get, get_validated_config

    # Load and validate (call once at startup)
    load_config("config/config.yaml")

    # Get values by dot-path
    max_owned = get("kitties.max_owned")

    # Or use the typed config object (preferred)
    config = get_validated_config()
    max_owned = config.kitties.max_owned
"""

from __future__ import annotations

import copy
import logging
import os
import yaml
from pathlib import Path
from typing import Any

from .config_schema import AppConfig, load_validated_config, validate_config_dict

# Global config instances
_config: dict[str, Any] | None = None
_validated_config: AppConfig | None = None

# Default config path
DEFAULT_CONFIG_PATH: Path = Path(__file__).parent.parent / "config" / "config.yaml"

CONFIG_ENV_VAR = "KITTIES_CONFIG"


def _resolve_path(config_path: str | None) -> Path:
    if config_path:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """Load and validate configuration from YAML file.

    Validates the config against the Pydantic schema. Invalid configs
    raise a ValidationError with details about what's wrong.

    Args:
        config_path: Path to config file. Defaults to $KITTIES_CONFIG,
            then config/config.yaml.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    global _config, _validated_config

    path: Path = _resolve_path(config_path)

    _validated_config = load_validated_config(path)

    with open(path) as f:
        loaded: Any = yaml.safe_load(f)
        if not isinstance(loaded, dict):
            loaded = {}
        _config = loaded

    return _config


def get_config() -> dict[str, Any]:
    """Get the loaded configuration dict. Loads default if not already loaded.

    For typed access, use get_validated_config() instead.
    """
    global _config
    if _config is None:
        load_config()
    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")
    return _config


def get_validated_config() -> AppConfig:
    """Get the validated configuration object.

    Returns a typed AppConfig instance with IDE autocompletion support.
    Loads default config if not already loaded.
    """
    global _validated_config
    if _validated_config is None:
        load_config()
    if _validated_config is None:
        raise RuntimeError("Validated config failed to load. Call load_config() first.")
    return _validated_config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-separated key path.

    Examples:
        get("kitties.max_owned")
        get("ledger.existential_deposit")
        get("genesis.balances.alice")
    """
    config: dict[str, Any] = get_config()
    keys: list[str] = key.split(".")

    value: Any = config
    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def set_config_value(key: str, value: Any) -> None:
    """Set a config value by dot-separated key path.

    Used for runtime overrides. The whole config is re-validated, so an
    invalid value raises pydantic.ValidationError and nothing changes.

    Args:
        key: Dot-separated key path (e.g., "kitties.max_owned")
        value: Value to set
    """
    global _config, _validated_config

    if _config is None:
        load_config()

    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")

    candidate: dict[str, Any] = copy.deepcopy(_config)
    keys = key.split(".")
    target = candidate

    # Navigate to parent
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            target[k] = {}
        target = target[k]

    target[keys[-1]] = value

    _validated_config = validate_config_dict(candidate)
    _config = candidate


def reset_config() -> None:
    """Forget the loaded config so the next access reloads it. Mainly for tests."""
    global _config, _validated_config
    _config = None
    _validated_config = None


def configure_logging(config: AppConfig | None = None) -> None:
    """Apply logging.level to the src.kitties loggers."""
    cfg = config if config is not None else get_validated_config()
    logging.getLogger("src.kitties").setLevel(cfg.logging.level)
