"""
Assembly of the monitoring server.

FleetServer owns the long-running components: the event center and the
lease stats and host reservation pullers. They are created once, wired
together explicitly, and stopped in dependency order by ``shutdown()``.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .agentcomm import Forwarder
from .collectors import HostsCollector, StatsCollector
from .eventcenter import Broker, EventCenter
from .models.config import AppConfig, MachineSeedConfig
from .models.inventory import App, Daemon, Machine
from .scheduling import Puller
from .storage import (
    HOSTS_PULLER_INTERVAL,
    STATS_PULLER_INTERVAL,
    InMemoryStore,
    MonitorStore,
    default_settings,
    write_snapshot,
)
from .validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


def seed_inventory(store: MonitorStore, machines: List[MachineSeedConfig]) -> List[App]:
    """
    Register the machines and applications declared in configuration.

    Args:
        store: Store to register them in
        machines: Machine declarations with their applications

    Returns:
        The registered applications, with identifiers assigned by the store
    """
    apps: List[App] = []
    for machine_seed in machines:
        machine = store.add_machine(
            Machine(
                id=0,
                address=machine_seed.address,
                agent_port=machine_seed.agent_port,
                hostname=machine_seed.hostname,
            )
        )
        for app_seed in machine_seed.apps:
            app = store.add_app(
                App(
                    id=0,
                    type=app_seed.type,
                    machine=machine,
                    ctrl_address=app_seed.ctrl_address,
                    ctrl_port=app_seed.ctrl_port,
                    name=app_seed.name,
                    daemons=[Daemon(id=0, name=name) for name in app_seed.daemons],
                )
            )
            apps.append(app)
    logger.info(f"Seeded inventory with {len(machines)} machines and {len(apps)} apps")
    return apps


class FleetServer:
    """
    The running monitoring server.

    Attributes:
        config: Loaded application configuration
        store: Store shared by all components
        forwarder: Transport to the agents
        event_center: Event persistence and broadcast
        stats_puller: Puller driving the lease stats collector
        hosts_puller: Puller driving the host reservations collector
    """

    def __init__(self, config: AppConfig, store: MonitorStore, forwarder: Forwarder):
        self.config = config
        self.store = store
        self.forwarder = forwarder
        self._stopped = False

        store.initialize_settings(
            default_settings(
                stats_interval=config.pullers.stats_interval,
                hosts_interval=config.pullers.hosts_interval,
            )
        )

        self.event_center = EventCenter(store, Broker(config.eventcenter.subscriber_queue_size))
        self.stats_collector = StatsCollector(store, forwarder, self.event_center)
        self.hosts_collector = HostsCollector(
            store, forwarder, self.event_center, page_limit=config.pullers.hosts_page_limit
        )

        self.pullers: List[Puller] = []
        try:
            self.stats_puller = Puller(
                "kea stats",
                lambda: store.get_setting_int(STATS_PULLER_INTERVAL),
                self.stats_collector.collect,
            )
            self.pullers.append(self.stats_puller)
            self.hosts_puller = Puller(
                "kea hosts",
                lambda: store.get_setting_int(HOSTS_PULLER_INTERVAL),
                self.hosts_collector.collect,
            )
            self.pullers.append(self.hosts_puller)
        except Exception:
            self.shutdown()
            raise

        logger.info("Fleet monitoring server started")

    def shutdown(self) -> Optional[Dict[str, Path]]:
        """
        Stop the server: pullers first, then the event center, then write
        the snapshot if enabled.

        Returns:
            Files written by the snapshot, or None if none was written
        """
        if self._stopped:
            return None
        self._stopped = True
        logger.info("Stopping fleet monitoring server")

        for puller in self.pullers:
            puller.shutdown()
        self.event_center.shutdown()

        written = None
        if self.config.snapshot.enabled:
            if isinstance(self.store, InMemoryStore):
                try:
                    written = write_snapshot(self.store, self.config.snapshot)
                except Exception as e:
                    handle_error(e, "writing snapshot", ErrorSeverity.ERROR, reraise=False, logger=logger)
            else:
                logger.warning(f"Snapshots are not supported for {type(self.store).__name__}")

        self.forwarder.close()
        logger.info("Fleet monitoring server stopped")
        return written
