"""
Lease statistics collector.

Sends ``stat-lease4-get`` to the DHCPv4 daemon and ``stat-lease6-get`` to
the DHCPv6 daemon of every Kea application, both in one batch, and stores
one record per subnet.
"""

import logging
from typing import Dict, List

from ..agentcomm import CommandBatch
from ..models.inventory import DHCP4_DAEMON, DHCP6_DAEMON, App
from ..models.records import LeaseStatsRecord
from ..utils import utc_now
from .base import AbstractCollector

logger = logging.getLogger(__name__)

SUBNET_ID_COLUMN = "subnet-id"

# daemon -> (command, address family)
STAT_COMMANDS = {
    DHCP4_DAEMON: ("stat-lease4-get", 4),
    DHCP6_DAEMON: ("stat-lease6-get", 6),
}


class StatsCollector(AbstractCollector):
    """Collects per-subnet lease statistics from Kea DHCP daemons."""

    description = "lease stats"

    def collect_from_app(self, app: App, daemons: List[str]) -> None:
        batch = CommandBatch()
        families: Dict[int, int] = {}
        for daemon in (DHCP4_DAEMON, DHCP6_DAEMON):
            if daemon not in daemons:
                continue
            command, family = STAT_COMMANDS[daemon]
            families[batch.add(command, [daemon])] = family

        result = self.submit(app, batch)

        collected_at = utc_now()
        records: List[LeaseStatsRecord] = []
        usable = False
        for slot, family in families.items():
            for response in result[slot]:
                if response.empty:
                    usable = True
                    continue
                if not response.success:
                    continue
                usable = True

                result_set = response.result_set()
                if result_set is None:
                    continue
                for row in result_set.records(required_columns=(SUBNET_ID_COLUMN,)):
                    subnet_id = row.pop(SUBNET_ID_COLUMN)
                    records.append(
                        LeaseStatsRecord(
                            app_id=app.id,
                            family=family,
                            subnet_id=subnet_id,
                            stats=row,
                            collected_at=collected_at,
                        )
                    )

        if not usable and result.last_error is not None:
            raise result.last_error

        self.store.upsert_lease_stats(app.id, records)
        logger.debug(f"Stored lease stats of {len(records)} subnets from app {app.id}")
