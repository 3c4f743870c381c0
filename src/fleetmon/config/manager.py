"""
Configuration management.

This module provides the main configuration loading interface and caches
the loaded configuration so it is read and validated only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import handle_config_error, ErrorSeverity
from .loader import get_inventory_path, load_inventory_config, load_main_config
from .validators import (
    validate_agents_config,
    validate_eventcenter_config,
    validate_inventory_config,
    validate_puller_config,
    validate_server_config,
    validate_snapshot_config,
)

logger = logging.getLogger(__name__)

# Holds the single loaded AppConfig once get_config() has run.
_CONFIG: Optional[AppConfig] = None

# Default path of the main configuration file. The CLI overrides it with
# --config, tests point it at temporary files.
_CONFIG_FILE_PATH = Path.cwd() / "conf" / "config.toml"


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path and drop any cached configuration.

    Args:
        config_path: Path to the main config.toml file
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def load_config(config_path: Path) -> AppConfig:
    """
    Load the complete application configuration from TOML files.

    Args:
        config_path: Path to the main config.toml file

    Returns:
        Fully validated AppConfig instance

    Raises:
        FileNotFoundError: If configuration files are missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If TOML files are malformed
    """
    try:
        main_config_data = load_main_config(config_path)

        inventory_path = get_inventory_path(main_config_data, config_path.parent)
        if inventory_path is not None:
            machines_data = load_inventory_config(inventory_path)
        else:
            machines_data = main_config_data.get("machines", [])

        app_config = AppConfig(
            server=validate_server_config(main_config_data.get("server", {})),
            pullers=validate_puller_config(main_config_data.get("pullers", {})),
            agents=validate_agents_config(main_config_data.get("agents", {})),
            eventcenter=validate_eventcenter_config(main_config_data.get("eventcenter", {})),
            snapshot=validate_snapshot_config(main_config_data.get("snapshot", {})),
            machines=validate_inventory_config(machines_data),
            inventory_path=str(inventory_path) if inventory_path else None,
        )

        logger.info(
            f"Successfully loaded configuration with {len(app_config.machines)} machines"
        )
        return app_config

    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AppConfig:
    """
    Get the application configuration, loading it on first access.

    Returns:
        The cached AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    """Check if configuration has been loaded and cached."""
    return _CONFIG is not None
