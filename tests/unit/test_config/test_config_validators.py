"""
Unit tests for configuration validation.

Tests the validation of the server, puller, agent, event center, snapshot
and inventory tables, including error reporting.
"""

import pytest

from fleetmon.config.validators import (
    validate_agents_config,
    validate_eventcenter_config,
    validate_inventory_config,
    validate_puller_config,
    validate_server_config,
    validate_snapshot_config,
)
from fleetmon.validation import ValidationError


@pytest.mark.unit
class TestSectionValidation:
    """Test cases for the single-table validators."""

    def test_server_config(self, sample_config_data):
        """Test the log level is normalized."""
        config = validate_server_config({"log_level": "debug"})
        assert config.log_level == "DEBUG"

    def test_server_config_invalid_level(self):
        """Test an unknown log level is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_server_config({"log_level": "chatty"})
        assert "server.log_level" in str(exc_info.value)

    def test_puller_config(self, sample_config_data):
        """Test puller intervals and page limit."""
        config = validate_puller_config(sample_config_data["pullers"])
        assert config.stats_interval == 30
        assert config.hosts_interval == 120
        assert config.hosts_page_limit == 50

    def test_puller_config_defaults(self):
        """Test defaults when the table is missing."""
        config = validate_puller_config({})
        assert config.stats_interval == 60
        assert config.hosts_interval == 60
        assert config.hosts_page_limit == 1000

    def test_puller_config_rejects_zero_interval(self):
        """Test a zero interval is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_puller_config({"stats_interval": 0})
        assert "pullers.stats_interval" in str(exc_info.value)

    def test_agents_config(self, sample_config_data):
        """Test agent communication settings."""
        config = validate_agents_config(sample_config_data["agents"])
        assert config.forward_timeout == 5.0
        assert config.forward_path == "/forward"

    def test_agents_config_relative_path(self):
        """Test the forward path must be absolute."""
        with pytest.raises(ValidationError):
            validate_agents_config({"forward_path": "forward"})

    def test_eventcenter_config(self, sample_config_data):
        """Test the subscriber queue size."""
        config = validate_eventcenter_config(sample_config_data["eventcenter"])
        assert config.subscriber_queue_size == 10

    def test_snapshot_config_invalid_compression(self):
        """Test an unsupported compression is reported as a validation error."""
        with pytest.raises(ValidationError):
            validate_snapshot_config({"enabled": True, "compression": "rar"})


@pytest.mark.unit
class TestInventoryValidation:
    """Test cases for inventory validation."""

    def test_valid_inventory(self, sample_machines_data):
        """Test machines and apps are converted."""
        machines = validate_inventory_config(sample_machines_data)

        assert len(machines) == 2
        assert machines[0].hostname == "dhcp-a"
        assert machines[0].apps[0].daemons == ["dhcp4", "dhcp6"]
        assert machines[1].agent_port == 8080
        assert machines[1].apps[0].ctrl_port == 8000

    def test_duplicate_machine(self, sample_machines_data):
        """Test the same address and port cannot be declared twice."""
        sample_machines_data[1]["address"] = "192.0.2.10"
        with pytest.raises(ValidationError) as exc_info:
            validate_inventory_config(sample_machines_data)
        assert "Duplicate" in str(exc_info.value)

    def test_missing_address(self):
        """Test a machine without an address."""
        with pytest.raises(ValidationError):
            validate_inventory_config([{"agent_port": 8080}])

    def test_bad_daemons(self, sample_machines_data):
        """Test daemons must be a list of names."""
        sample_machines_data[0]["apps"][0]["daemons"] = "dhcp4"
        with pytest.raises(ValidationError):
            validate_inventory_config(sample_machines_data)
