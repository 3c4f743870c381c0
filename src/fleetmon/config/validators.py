"""
Configuration validation utilities.

This module turns raw TOML tables into validated configuration models.
"""

import logging
from typing import Any, Dict, List

from ..models.config import (
    AgentsConfig,
    AppSeedConfig,
    EventCenterConfig,
    MachineSeedConfig,
    PullerConfig,
    ServerConfig,
    SnapshotConfig,
)
from ..models.inventory import BIND9_APP_TYPE, KEA_APP_TYPE
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_non_empty_string,
    validate_port,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_server_config(server_data: Dict[str, Any]) -> ServerConfig:
    """Validate the ``[server]`` table."""
    log_level = validate_enum_choice(
        server_data.get("log_level", "INFO"),
        choices=LOG_LEVELS,
        field_name="server.log_level",
        case_sensitive=False,
    )
    return ServerConfig(log_level=log_level)


def validate_puller_config(puller_data: Dict[str, Any]) -> PullerConfig:
    """
    Validate the ``[pullers]`` table.

    Raises:
        ValidationError: If an interval or the page limit is out of range
    """
    stats_interval = validate_positive_integer(
        puller_data.get("stats_interval", 60),
        min_value=1,
        max_value=86400,
        field_name="pullers.stats_interval",
    )
    hosts_interval = validate_positive_integer(
        puller_data.get("hosts_interval", 60),
        min_value=1,
        max_value=86400,
        field_name="pullers.hosts_interval",
    )
    hosts_page_limit = validate_positive_integer(
        puller_data.get("hosts_page_limit", 1000),
        min_value=1,
        max_value=100000,
        field_name="pullers.hosts_page_limit",
    )
    return PullerConfig(
        stats_interval=stats_interval,
        hosts_interval=hosts_interval,
        hosts_page_limit=hosts_page_limit,
    )


def validate_agents_config(agents_data: Dict[str, Any]) -> AgentsConfig:
    """Validate the ``[agents]`` table."""
    forward_timeout = validate_positive_float(
        agents_data.get("forward_timeout", 10.0),
        min_value=0.1,
        max_value=600.0,
        field_name="agents.forward_timeout",
    )
    forward_path = validate_non_empty_string(
        agents_data.get("forward_path", "/forward"),
        field_name="agents.forward_path",
    )
    if not forward_path.startswith("/"):
        raise ValidationError(
            "agents.forward_path must start with '/'",
            field_name="agents.forward_path",
            value=forward_path,
        )
    return AgentsConfig(forward_timeout=forward_timeout, forward_path=forward_path)


def validate_eventcenter_config(eventcenter_data: Dict[str, Any]) -> EventCenterConfig:
    """Validate the ``[eventcenter]`` table."""
    queue_size = validate_positive_integer(
        eventcenter_data.get("subscriber_queue_size", 100),
        min_value=1,
        max_value=100000,
        field_name="eventcenter.subscriber_queue_size",
    )
    return EventCenterConfig(subscriber_queue_size=queue_size)


def validate_snapshot_config(snapshot_data: Dict[str, Any]) -> SnapshotConfig:
    """Validate the ``[snapshot]`` table."""
    try:
        return SnapshotConfig.from_dict(snapshot_data)
    except ValueError as e:
        raise ValidationError(str(e), field_name="snapshot", value=snapshot_data)


def _validate_app_seed(app_data: Dict[str, Any], field_prefix: str) -> AppSeedConfig:
    app_type = validate_enum_choice(
        app_data.get("type", KEA_APP_TYPE),
        choices=[KEA_APP_TYPE, BIND9_APP_TYPE],
        field_name=f"{field_prefix}.type",
    )
    ctrl_port = validate_port(app_data.get("ctrl_port", 8000), field_name=f"{field_prefix}.ctrl_port")
    ctrl_address = validate_non_empty_string(
        app_data.get("ctrl_address", "localhost"), field_name=f"{field_prefix}.ctrl_address"
    )

    daemons = app_data.get("daemons", [])
    if not isinstance(daemons, list) or not all(isinstance(d, str) and d for d in daemons):
        raise ValidationError(
            f"{field_prefix}.daemons must be a list of daemon names",
            field_name=f"{field_prefix}.daemons",
            value=daemons,
        )

    return AppSeedConfig(
        type=app_type,
        ctrl_address=ctrl_address,
        ctrl_port=ctrl_port,
        name=str(app_data.get("name", "")),
        daemons=list(daemons),
    )


def validate_inventory_config(machines_data: List[Dict[str, Any]]) -> List[MachineSeedConfig]:
    """
    Validate the ``[[machines]]`` tables of the inventory.

    Raises:
        ValidationError: If a machine or one of its apps is malformed, or
            the same address and agent port are declared twice
    """
    machines: List[MachineSeedConfig] = []
    seen = set()

    for index, machine_data in enumerate(machines_data):
        field_prefix = f"machines[{index}]"
        address = validate_non_empty_string(
            machine_data.get("address"), field_name=f"{field_prefix}.address"
        )
        agent_port = validate_port(
            machine_data.get("agent_port", 8080), field_name=f"{field_prefix}.agent_port"
        )
        if (address, agent_port) in seen:
            raise ValidationError(
                f"Duplicate machine {address}:{agent_port}",
                field_name=f"{field_prefix}.address",
                value=address,
            )
        seen.add((address, agent_port))

        apps = [
            _validate_app_seed(app_data, f"{field_prefix}.apps[{app_index}]")
            for app_index, app_data in enumerate(machine_data.get("apps", []))
        ]
        machines.append(
            MachineSeedConfig(
                address=address,
                agent_port=agent_port,
                hostname=str(machine_data.get("hostname", "")),
                apps=apps,
            )
        )

    logger.debug(f"Validated inventory with {len(machines)} machines")
    return machines
