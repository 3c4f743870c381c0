"""
Unit tests for configuration loading and caching.
"""

from pathlib import Path

import pytest

from fleetmon.config import (
    clear_config_cache,
    get_config,
    is_config_loaded,
    load_config,
    set_config_path,
)
from fleetmon.validation import ValidationError

MAIN_CONFIG = """
[server]
log_level = "WARNING"

[pullers]
stats_interval = 15

[snapshot]
enabled = true
directory = "out"
"""

INLINE_MACHINES = """
[[machines]]
address = "10.0.0.1"

  [[machines.apps]]
  type = "kea"
  daemons = ["dhcp4"]
"""


@pytest.mark.unit
class TestConfigLoading:
    """Test cases for load_config."""

    def test_load_with_inline_machines(self, tmp_path):
        """Test loading machines declared in the main file."""
        config_path = tmp_path / "config.toml"
        config_path.write_text(MAIN_CONFIG + INLINE_MACHINES)

        config = load_config(config_path)

        assert config.server.log_level == "WARNING"
        assert config.pullers.stats_interval == 15
        assert config.pullers.hosts_interval == 60
        assert config.snapshot.enabled is True
        assert config.snapshot.directory == "out"
        assert [m.address for m in config.machines] == ["10.0.0.1"]
        assert config.inventory_path is None

    def test_load_with_inventory_file(self, tmp_path):
        """Test loading machines from the file named in [paths]."""
        (tmp_path / "inventory.toml").write_text(INLINE_MACHINES)
        config_path = tmp_path / "config.toml"
        config_path.write_text('[paths]\ninventory = "inventory.toml"\n')

        config = load_config(config_path)

        assert len(config.machines) == 1
        assert config.machines[0].apps[0].daemons == ["dhcp4"]
        assert config.inventory_path == str(tmp_path / "inventory.toml")

    def test_missing_file(self, tmp_path):
        """Test a missing configuration file."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_values(self, tmp_path):
        """Test validation errors propagate."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("[pullers]\nstats_interval = -5\n")
        with pytest.raises(ValidationError):
            load_config(config_path)


@pytest.mark.unit
class TestConfigCache:
    """Test cases for the cached configuration."""

    def test_get_config_caches(self, tmp_path):
        """Test the configuration is loaded once until cleared."""
        config_path = tmp_path / "config.toml"
        config_path.write_text(MAIN_CONFIG)
        set_config_path(config_path)

        assert not is_config_loaded()
        first = get_config()
        assert is_config_loaded()
        assert get_config() is first

        clear_config_cache()
        assert not is_config_loaded()
        assert get_config() is not first
