"""
Connection configuration loading.

Settings come from an optional YAML file with a ``connection`` mapping::

    connection:
      host: db.internal
      port: 3306
      user: reader
      database: shop
      timeout: 10
      max_attempts: 3

Explicit overrides (CLI options, environment variables resolved by click)
win over the file.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from entity_synth.errors import ConfigError
from entity_synth.models import ConnectionConfig

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {f.name for f in fields(ConnectionConfig)}


def load_connection_config(path: Optional[Path] = None, **overrides: Any) -> ConnectionConfig:
    """
    Build a validated ConnectionConfig.

    Args:
        path: Optional YAML file with a ``connection`` mapping
        **overrides: Individual settings; None values are ignored

    Returns:
        ConnectionConfig

    Raises:
        ConfigError: On a missing file, unknown keys or invalid values
    """
    settings: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        settings.update(data.get("connection", {}) or {})
        logger.info(f"Loaded connection settings from {path}")

    settings.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(settings) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(f"Unknown connection settings: {', '.join(sorted(unknown))}")
    if not settings.get("database"):
        raise ConfigError("A database name is required")

    try:
        config = ConnectionConfig(**settings)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid connection settings: {e}") from e

    validate_connection_config(config)
    return config


def validate_connection_config(config: ConnectionConfig) -> None:
    """Reject settings that would make catalog calls unbounded."""
    if config.timeout is None or float(config.timeout) <= 0:
        raise ConfigError(f"timeout must be positive, got {config.timeout}")
    if int(config.max_attempts) < 1:
        raise ConfigError(f"max_attempts must be at least 1, got {config.max_attempts}")
    if config.backoff_initial < 0 or config.backoff_max < config.backoff_initial:
        raise ConfigError(
            f"Invalid backoff window: initial={config.backoff_initial}, max={config.backoff_max}"
        )
    if not 0 < config.port < 65536:
        raise ConfigError(f"Invalid port: {config.port}")
