"""
Normalized records produced by the collectors.

Every record is keyed by the application it was pulled from plus a natural
key within that application, so that repeated collection cycles upsert
rather than duplicate.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class LeaseStatsRecord:
    """
    Lease statistics of a single subnet as reported by one DHCP daemon.

    Attributes:
        app_id: Application the statistics were pulled from
        family: 4 or 6
        subnet_id: Subnet identifier local to the daemon
        stats: Statistic name to value, e.g. {"assigned-addresses": 10}
        collected_at: Time of the collection cycle
    """

    app_id: int
    family: int
    subnet_id: int
    stats: Dict[str, int]
    collected_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[int, int, int]:
        return (self.app_id, self.family, self.subnet_id)

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "app_id": self.app_id,
            "family": self.family,
            "subnet_id": self.subnet_id,
            "collected_at": self.collected_at,
        }
        row.update(self.stats)
        return row


@dataclass
class HostRecord:
    """A host reservation pulled from one DHCP daemon."""

    app_id: int
    family: int
    subnet_id: int
    hw_address: Optional[str] = None
    duid: Optional[str] = None
    client_id: Optional[str] = None
    hostname: str = ""
    ip_addresses: List[str] = field(default_factory=list)
    prefixes: List[str] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        """The identifier the daemon uses to match the client."""
        if self.hw_address:
            return f"hw-address={self.hw_address}"
        if self.duid:
            return f"duid={self.duid}"
        if self.client_id:
            return f"client-id={self.client_id}"
        return f"hostname={self.hostname}"

    @property
    def key(self) -> Tuple[int, int, int, str]:
        return (self.app_id, self.family, self.subnet_id, self.identifier)

    def to_row(self) -> Dict[str, Any]:
        return {
            "app_id": self.app_id,
            "family": self.family,
            "subnet_id": self.subnet_id,
            "hw_address": self.hw_address,
            "duid": self.duid,
            "client_id": self.client_id,
            "hostname": self.hostname,
            "ip_addresses": ",".join(self.ip_addresses),
            "prefixes": ",".join(self.prefixes),
        }
