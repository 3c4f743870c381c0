"""
Defines the base class for collectors that pull data from Kea applications.

A collector visits every application of its type once per cycle. Each
application is handled independently: one that has no relevant daemon is
skipped, one that fails is recorded and the cycle moves on, and the cycle
ends with a CollectionOutcome summarizing the result. Subclasses only
implement how data is pulled from a single application.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Set

from ..agentcomm import BatchResult, CommandBatch, Forwarder
from ..models.inventory import DHCP_DAEMONS, KEA_APP_TYPE, App
from ..models.results import CollectionOutcome
from ..storage import MonitorStore
from ..utils import host_with_port_url

logger = logging.getLogger(__name__)


class AbstractCollector(ABC):
    """
    Abstract base class for collectors.

    Attributes:
        description: What is collected, used in logs and event texts
        app_type: Type of applications visited
        relevant_daemons: Daemons of interest; applications without any of
            them active are skipped
    """

    description = "data"
    app_type = KEA_APP_TYPE
    relevant_daemons = DHCP_DAEMONS

    def __init__(self, store: MonitorStore, forwarder: Forwarder, event_center: Optional[Any] = None):
        """
        Args:
            store: Store providing the applications and receiving the records
            forwarder: Transport to the agents
            event_center: Receives reachability change events; optional
        """
        self.store = store
        self.forwarder = forwarder
        self.event_center = event_center
        self._failing_apps: Set[int] = set()

    def collect(self) -> CollectionOutcome:
        """
        Run one collection cycle over all applications.

        Returns:
            Outcome of the cycle; it never raises for per-application errors
        """
        outcome = CollectionOutcome()
        try:
            apps = self.store.get_apps_by_type(self.app_type)
        except Exception as e:
            logger.error(f"Cannot get {self.app_type} apps from the store: {e}")
            outcome.last_error = e
            return outcome

        for app in apps:
            daemons = list(app.active_daemons(self.relevant_daemons))
            if not daemons:
                logger.debug(f"Skipping app {app.id}: no active {'/'.join(self.relevant_daemons)} daemons")
                outcome.record_skip()
                continue

            try:
                self.collect_from_app(app, daemons)
            except Exception as e:
                logger.error(
                    f"Error occurred while pulling {self.description} from app {app.id} "
                    f"({app.machine.address}): {e}"
                )
                outcome.record_failure(app.id, e)
                self._report_failure(app, e)
            else:
                outcome.record_success()
                self._report_recovery(app)

        logger.info(f"Pulled {self.description} from {self.app_type} apps: {outcome}")
        return outcome

    @abstractmethod
    def collect_from_app(self, app: App, daemons: List[str]) -> None:
        """
        Pull data from one application and write it to the store.

        Args:
            app: Application to pull from
            daemons: Names of its active relevant daemons, never empty

        Raises:
            Exception: Any error marks the application as failed for this cycle
        """
        pass

    def submit(self, app: App, batch: CommandBatch) -> BatchResult:
        """Submit a batch to the control agent of the application."""
        ca_url = host_with_port_url(app.ctrl_address, app.ctrl_port)
        return batch.submit(self.forwarder, app.machine.address, app.machine.agent_port, ca_url)

    def _report_failure(self, app: App, error: Exception) -> None:
        if app.id in self._failing_apps:
            return
        self._failing_apps.add(app.id)
        if self.event_center is not None:
            self.event_center.add_warning_event(
                f"Cannot pull {self.description} from {{app}} on {{machine}}: {error}",
                app,
                app.machine,
            )

    def _report_recovery(self, app: App) -> None:
        if app.id not in self._failing_apps:
            return
        self._failing_apps.discard(app.id)
        if self.event_center is not None:
            self.event_center.add_info_event(
                f"Pulling {self.description} from {{app}} on {{machine}} resumed",
                app,
                app.machine,
            )
