"""
Collectors pulling data from the monitored applications.

Each collector runs one cycle per puller tick over all Kea applications:
- StatsCollector: per-subnet lease statistics
- HostsCollector: host reservations
"""

from .base import AbstractCollector
from .hosts_puller import HostsCollector, normalize_host
from .stats_puller import StatsCollector

__all__ = [
    "AbstractCollector",
    "HostsCollector",
    "StatsCollector",
    "normalize_host",
]
