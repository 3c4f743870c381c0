"""
Data models for the fleet monitoring server.

Configuration Models:
- Server, puller, agent and event center settings
- Inventory seed declared in configuration

Inventory Models:
- Machines, applications, daemons and subnets of the monitored fleet

Event Models:
- Events, their severity levels and entity relations

Collection Models:
- Normalized lease statistics and host reservation records
- Per-cycle collection outcome
"""

from .config import (
    SnapshotConfig,
    AgentsConfig,
    AppConfig,
    AppSeedConfig,
    EventCenterConfig,
    MachineSeedConfig,
    PullerConfig,
    ServerConfig,
)
from .events import Event, EventLevel, Relations
from .inventory import (
    BIND9_APP_TYPE,
    DHCP4_DAEMON,
    DHCP6_DAEMON,
    DHCP_DAEMONS,
    KEA_APP_TYPE,
    App,
    Daemon,
    Machine,
    Subnet,
)
from .records import HostRecord, LeaseStatsRecord
from .results import CollectionOutcome

__all__ = [
    # Configuration
    "AgentsConfig",
    "AppConfig",
    "AppSeedConfig",
    "EventCenterConfig",
    "MachineSeedConfig",
    "PullerConfig",
    "ServerConfig",
    "SnapshotConfig",
    # Events
    "Event",
    "EventLevel",
    "Relations",
    # Inventory
    "BIND9_APP_TYPE",
    "DHCP4_DAEMON",
    "DHCP6_DAEMON",
    "DHCP_DAEMONS",
    "KEA_APP_TYPE",
    "App",
    "Daemon",
    "Machine",
    "Subnet",
    # Collection
    "HostRecord",
    "LeaseStatsRecord",
    "CollectionOutcome",
]
