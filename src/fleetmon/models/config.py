"""
Configuration data models.

This module contains the configuration structures for the server, the
pullers, agent communication, the event center and the inventory seed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

SNAPSHOT_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class SnapshotConfig:
    """
    Parquet snapshot settings, loaded from ``[snapshot]``.

    When enabled, the collected lease statistics, host reservations and
    events are written as Parquet files into ``directory`` at shutdown.

    Attributes:
        enabled: Whether a snapshot is written
        directory: Output directory for the Parquet files
        compression: Parquet compression algorithm
    """

    enabled: bool = False
    directory: str = "snapshots"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SnapshotConfig":
        """
        Create a SnapshotConfig instance from a dictionary.

        Raises:
            ValueError: If invalid configuration values are provided
        """
        enabled = config_dict.get("enabled", False)
        directory = config_dict.get("directory", "snapshots")
        compression = config_dict.get("compression", "snappy")

        if not isinstance(enabled, bool):
            raise ValueError(f"snapshot.enabled must be a boolean, got {enabled!r}")
        if compression not in SNAPSHOT_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")
        if not isinstance(directory, str) or not directory.strip():
            raise ValueError("snapshot.directory must be a non-empty string")

        return cls(enabled=enabled, directory=directory, compression=compression)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "directory": self.directory,
            "compression": self.compression,
        }


@dataclass
class ServerConfig:
    """
    Global server behaviour, loaded from the ``[server]`` table of `config.toml`.
    """

    log_level: str = "INFO"


@dataclass
class PullerConfig:
    """
    Puller cadence, loaded from ``[pullers]``.

    The intervals seed the ``kea_stats_puller_interval`` and
    ``kea_hosts_puller_interval`` settings on first start; afterwards the
    settings held by the store are authoritative.
    """

    stats_interval: int = 60
    hosts_interval: int = 60
    # Hosts requested per reservation-get-page call.
    hosts_page_limit: int = 1000


@dataclass
class AgentsConfig:
    """Agent communication, loaded from ``[agents]``."""

    # Upper bound for a single forwarded call, in seconds.
    forward_timeout: float = 10.0
    forward_path: str = "/forward"


@dataclass
class EventCenterConfig:
    """Event center tuning, loaded from ``[eventcenter]``."""

    # Events buffered per live subscriber before further ones are dropped.
    subscriber_queue_size: int = 100


@dataclass
class AppSeedConfig:
    """An application declared in the inventory file."""

    type: str
    ctrl_address: str = "localhost"
    ctrl_port: int = 8000
    name: str = ""
    daemons: List[str] = field(default_factory=list)


@dataclass
class MachineSeedConfig:
    """A machine declared in the inventory file, with its applications."""

    address: str
    agent_port: int = 8080
    hostname: str = ""
    apps: List[AppSeedConfig] = field(default_factory=list)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    pullers: PullerConfig = field(default_factory=PullerConfig)
    agents: AgentsConfig = field(default_factory=AgentsConfig)
    eventcenter: EventCenterConfig = field(default_factory=EventCenterConfig)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)
    # Machines to register in the store at startup.
    machines: List[MachineSeedConfig] = field(default_factory=list)
    # Where the inventory was read from, if a separate file was used.
    inventory_path: Optional[str] = None
