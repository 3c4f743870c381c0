"""
fleetmon: monitoring server for fleets of Kea DHCP servers.

The package periodically pulls lease statistics and host reservations from
Kea applications through the agents running on the monitored machines, and
publishes timestamped events to live subscribers.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Inventory, event, record and configuration data structures
- validation: Input validation and error handling
- agentcomm: Command batches and the transport to the agents
- scheduling: Periodic pullers
- collectors: Lease statistics and host reservation collectors
- eventcenter: Event persistence, tagging and broadcast
- storage: Store interface, in-memory store and Parquet snapshots
- cli: Command-line interface

Usage:
    From command line:
        fleetmon --config conf/config.toml

    Programmatically:
        from fleetmon import FleetServer, HttpForwarder, InMemoryStore, get_config
        server = FleetServer(get_config(), InMemoryStore(), HttpForwarder())
        ...
        server.shutdown()
"""

from .agentcomm import CommandBatch, Forwarder, HttpForwarder
from .cli import main_cli
from .collectors import HostsCollector, StatsCollector
from .config import clear_config_cache, get_config, set_config_path
from .eventcenter import Broker, EventCenter, create_event
from .exceptions import (
    CommandError,
    FleetmonError,
    ProtocolError,
    SettingError,
    StorageError,
    TransportError,
)
from .models import AppConfig, CollectionOutcome, Event, EventLevel
from .scheduling import Puller
from .server import FleetServer, seed_inventory
from .storage import InMemoryStore, MonitorStore
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "FleetServer",
    "seed_inventory",
    "main_cli",
    # Components
    "CommandBatch",
    "Forwarder",
    "HttpForwarder",
    "Puller",
    "StatsCollector",
    "HostsCollector",
    "Broker",
    "EventCenter",
    "create_event",
    "InMemoryStore",
    "MonitorStore",
    # Models
    "AppConfig",
    "CollectionOutcome",
    "Event",
    "EventLevel",
    # Errors
    "FleetmonError",
    "TransportError",
    "ProtocolError",
    "CommandError",
    "StorageError",
    "SettingError",
    "ValidationError",
]
