"""
Inventory data models.

These describe the monitored fleet as the storage collaborator returns it:
machines running an agent, the applications found on them, the daemons of
each application, and the subnets they serve. Collectors read them every
cycle; the event center uses them to build event tags and relations.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

KEA_APP_TYPE = "kea"
BIND9_APP_TYPE = "bind9"

DHCP4_DAEMON = "dhcp4"
DHCP6_DAEMON = "dhcp6"
DHCP_DAEMONS = (DHCP4_DAEMON, DHCP6_DAEMON)


@dataclass
class Machine:
    """A host running an agent."""

    id: int
    address: str
    agent_port: int
    hostname: str = ""


@dataclass
class Daemon:
    """
    A single daemon belonging to an application, e.g. Kea ``dhcp4``.

    ``app_type`` is carried so the daemon can be described without a trip
    back to its application.
    """

    id: int
    name: str
    app_id: int = 0
    app_type: str = KEA_APP_TYPE
    active: bool = True


@dataclass
class App:
    """
    A monitored application on a machine; for Kea this is the control agent
    together with the daemons behind it.

    Attributes:
        id: Stable numeric identifier
        type: Application type (``kea`` or ``bind9``)
        machine: Machine the application runs on
        ctrl_address: Address of the application's control endpoint
        ctrl_port: Port of the application's control endpoint
        name: Display name
        version: Reported software version
        daemons: Daemons known for this application
    """

    id: int
    type: str
    machine: Machine
    ctrl_address: str = "localhost"
    ctrl_port: int = 8000
    name: str = ""
    version: str = ""
    daemons: List[Daemon] = field(default_factory=list)

    def active_daemons(self, names: Optional[tuple] = None) -> Dict[str, Daemon]:
        """
        Return the active daemons, optionally restricted to the given names.

        Args:
            names: Daemon names of interest; None means all

        Returns:
            Mapping of daemon name to daemon, in declaration order
        """
        selected: Dict[str, Daemon] = {}
        for daemon in self.daemons:
            if not daemon.active:
                continue
            if names is not None and daemon.name not in names:
                continue
            selected[daemon.name] = daemon
        return selected


@dataclass
class Subnet:
    """A subnet served by one or more DHCP daemons."""

    id: int
    prefix: str
