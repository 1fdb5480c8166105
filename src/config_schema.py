"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# KITTIES MODEL
# =============================================================================

class KittiesConfig(StrictModel):
    """Registry capacity limits."""

    max_owned: int = Field(
        default=100,
        gt=0,
        description="Maximum kitties a single account may hold"
    )
    max_count: int = Field(
        default=2**32 - 1,
        gt=0,
        le=2**32 - 1,
        description="Maximum value of the registry counter"
    )


# =============================================================================
# LEDGER MODEL
# =============================================================================

class LedgerConfig(StrictModel):
    """Native currency configuration."""

    existential_deposit: int = Field(
        default=1,
        ge=0,
        description="Minimum balance an account must keep to exist"
    )


# =============================================================================
# GENESIS MODEL
# =============================================================================

class GenesisConfig(StrictModel):
    """State seeded when the runtime starts."""

    balances: dict[str, int] = Field(
        default_factory=dict,
        description="Starting balance per account"
    )

    @field_validator("balances")
    @classmethod
    def balances_non_negative(cls, v: dict[str, int]) -> dict[str, int]:
        for account, amount in v.items():
            if not account:
                raise ValueError("genesis account id cannot be empty")
            if amount < 0:
                raise ValueError(f"genesis balance for {account} cannot be negative")
        return v


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Level for the src.kitties loggers"
    )
    events_file: str | None = Field(
        default=None,
        description="JSONL file for committed events (None keeps them in memory only)"
    )
    default_recent: int = Field(
        default=50,
        gt=0,
        description="Default number of recent events to return"
    )


# =============================================================================
# ROOT CONFIG
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model.

    All fields have sensible defaults, so an empty config file is valid.
    """

    kitties: KittiesConfig = Field(default_factory=KittiesConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    genesis: GenesisConfig = Field(default_factory=GenesisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Args:
        config_dict: Configuration as a dictionary.

    Returns:
        Validated AppConfig instance.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "AppConfig",
    "KittiesConfig",
    "LedgerConfig",
    "GenesisConfig",
    "LoggingConfig",
    "load_validated_config",
    "validate_config_dict",
]
