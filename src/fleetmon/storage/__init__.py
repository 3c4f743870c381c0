"""
Storage for the monitoring server.

This package provides the store collaborator used by the collectors and the
event center:
- An abstract store interface with typed settings helpers
- A thread-safe in-memory implementation with Polars DataFrame export
- Parquet snapshots of the collected data
"""

from .base import MonitorStore
from .memory_store import InMemoryStore
from .settings import (
    HOSTS_PULLER_INTERVAL,
    STATS_PULLER_INTERVAL,
    Setting,
    SettingValType,
    default_settings,
)
from .snapshot import write_snapshot

__all__ = [
    "MonitorStore",
    "InMemoryStore",
    "Setting",
    "SettingValType",
    "default_settings",
    "HOSTS_PULLER_INTERVAL",
    "STATS_PULLER_INTERVAL",
    "write_snapshot",
]
