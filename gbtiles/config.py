"""
Export configuration defaults and config file loading.

A config file is a JSON object whose keys are ExportConfig field names, e.g.:

    {"mode": "slices", "sort_by": "position", "tile_format": "hex"}

Missing keys keep their defaults.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from gbtiles.errors import ConfigError
from gbtiles.models import ExportConfig

logger = logging.getLogger("gbtiles.config")

# Use your own default configuration here
DEFAULT_CONFIG = ExportConfig()


def build_config(
    overrides: Optional[Dict[str, Any]] = None, base: Optional[ExportConfig] = None
) -> ExportConfig:
    """
    Create an ExportConfig from a base config and a dict of overrides.

    Args:
        overrides: Field values to replace; None values are ignored
        base: Config to start from (defaults to DEFAULT_CONFIG)

    Returns:
        Validated ExportConfig

    Raises:
        ConfigError: If a key is unknown or a value is invalid
    """
    base = base or DEFAULT_CONFIG
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    unknown = sorted(set(overrides) - set(ExportConfig.model_fields))
    if unknown:
        raise ConfigError(f"Unknown config option(s): {', '.join(unknown)}")

    values = base.model_dump()
    values.update(overrides)
    try:
        return ExportConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid export configuration: {e}") from e


def load_config(config_path: str, base: Optional[ExportConfig] = None) -> ExportConfig:
    """
    Load export settings from a JSON file.

    Args:
        config_path: Path to the JSON config file
        base: Config the file values are applied on top of

    Returns:
        Validated ExportConfig
    """
    try:
        with open(config_path, "r") as file:
            data = json.load(file)
    except OSError as e:
        raise ConfigError(f"Could not read config file '{config_path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file '{config_path}' is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a JSON object")

    logger.info(f"Loaded export settings from {config_path}")
    return build_config(data, base=base)
