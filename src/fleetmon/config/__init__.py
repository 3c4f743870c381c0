"""
Configuration management for the fleetmon package.

This module provides a clean interface for loading, validating, and accessing
configuration data from TOML files.
"""

from .manager import (
    clear_config_cache,
    get_config,
    is_config_loaded,
    load_config,
    set_config_path,
)

from .loader import (
    get_inventory_path,
    load_inventory_config,
    load_main_config,
    load_toml_file,
)
from .validators import (
    validate_agents_config,
    validate_eventcenter_config,
    validate_inventory_config,
    validate_puller_config,
    validate_server_config,
    validate_snapshot_config,
)

__all__ = [
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "load_config",
    "load_toml_file",
    "load_main_config",
    "load_inventory_config",
    "get_inventory_path",
    "validate_agents_config",
    "validate_eventcenter_config",
    "validate_inventory_config",
    "validate_puller_config",
    "validate_server_config",
    "validate_snapshot_config",
]
