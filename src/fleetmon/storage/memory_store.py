"""
In-process implementation of the monitoring store.

All state lives in dictionaries guarded by one re-entrant lock, which makes
the store safe to share between the puller threads and the event center
writer. Collected data can be exported as Polars DataFrames for snapshots
and ad hoc analysis.
"""

import copy
import dataclasses
import logging
import threading
from typing import Dict, List, Optional, Tuple

import polars as pl

from ..exceptions import SettingError, StorageError
from ..models.events import Event
from ..models.inventory import App, Machine
from ..models.records import HostRecord, LeaseStatsRecord
from ..utils import utc_now
from .base import MonitorStore
from .settings import Setting

logger = logging.getLogger(__name__)

EVENT_SORT_FIELDS = ("created_at", "id", "level")


def _typed(frame: pl.DataFrame) -> pl.DataFrame:
    # All-null columns have no Parquet type; store them as strings
    null_columns = [name for name, dtype in frame.schema.items() if dtype == pl.Null]
    if not null_columns:
        return frame
    return frame.with_columns([pl.col(name).cast(pl.String) for name in null_columns])


class InMemoryStore(MonitorStore):
    """
    Thread-safe store keeping everything in memory.

    Objects handed out are copies, so callers cannot mutate the stored state
    behind the lock.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._machines: Dict[int, Machine] = {}
        self._apps: Dict[int, App] = {}
        self._lease_stats: Dict[Tuple[int, int, int], LeaseStatsRecord] = {}
        self._hosts: Dict[Tuple[int, int, int, str], HostRecord] = {}
        self._events: List[Event] = []
        self._settings: Dict[str, Setting] = {}

        self._next_machine_id = 1
        self._next_app_id = 1
        self._next_daemon_id = 1
        self._next_event_id = 1

    # --- Inventory ---

    def add_machine(self, machine: Machine) -> Machine:
        with self._lock:
            stored = copy.deepcopy(machine)
            if not stored.id:
                stored.id = self._next_machine_id
            self._next_machine_id = max(self._next_machine_id, stored.id + 1)
            self._machines[stored.id] = stored
            logger.debug(f"Added machine {stored.id} at {stored.address}:{stored.agent_port}")
            return copy.deepcopy(stored)

    def add_app(self, app: App) -> App:
        with self._lock:
            stored = copy.deepcopy(app)
            if not stored.id:
                stored.id = self._next_app_id
            self._next_app_id = max(self._next_app_id, stored.id + 1)

            for daemon in stored.daemons:
                if not daemon.id:
                    daemon.id = self._next_daemon_id
                self._next_daemon_id = max(self._next_daemon_id, daemon.id + 1)
                daemon.app_id = stored.id
                daemon.app_type = stored.type

            if stored.machine.id and stored.machine.id not in self._machines:
                self._machines[stored.machine.id] = copy.deepcopy(stored.machine)
            self._apps[stored.id] = stored
            logger.debug(f"Added {stored.type} app {stored.id} with {len(stored.daemons)} daemons")
            return copy.deepcopy(stored)

    def get_apps_by_type(self, app_type: str) -> List[App]:
        with self._lock:
            return [
                copy.deepcopy(app)
                for app in sorted(self._apps.values(), key=lambda a: a.id)
                if app.type == app_type
            ]

    # --- Collected data ---

    def upsert_lease_stats(self, app_id: int, records: List[LeaseStatsRecord]) -> None:
        with self._lock:
            self._require_app(app_id)
            for record in records:
                stored = copy.deepcopy(record)
                stored.app_id = app_id
                self._lease_stats[stored.key] = stored

    def get_lease_stats(self, app_id: Optional[int] = None) -> List[LeaseStatsRecord]:
        with self._lock:
            return [
                copy.deepcopy(record)
                for key, record in sorted(self._lease_stats.items())
                if app_id is None or record.app_id == app_id
            ]

    def upsert_hosts(self, app_id: int, records: List[HostRecord]) -> None:
        with self._lock:
            self._require_app(app_id)
            for record in records:
                stored = copy.deepcopy(record)
                stored.app_id = app_id
                self._hosts[stored.key] = stored

    def get_hosts(self, app_id: Optional[int] = None) -> List[HostRecord]:
        with self._lock:
            return [
                copy.deepcopy(record)
                for key, record in sorted(self._hosts.items())
                if app_id is None or record.app_id == app_id
            ]

    def _require_app(self, app_id: int) -> None:
        if app_id not in self._apps:
            raise StorageError(f"app {app_id} does not exist")

    # --- Events ---

    def add_event(self, event: Event) -> Event:
        with self._lock:
            stored = dataclasses.replace(
                event,
                id=self._next_event_id,
                created_at=utc_now(),
            )
            self._next_event_id += 1
            self._events.append(stored)
            return stored

    def get_events_by_page(
        self,
        offset: int = 0,
        limit: int = 10,
        sort_field: str = "created_at",
        descending: bool = True,
    ) -> Tuple[List[Event], int]:
        if sort_field not in EVENT_SORT_FIELDS:
            raise StorageError(f"cannot sort events by {sort_field!r}")
        if offset < 0 or limit < 0:
            raise StorageError("offset and limit must not be negative")

        with self._lock:
            events = sorted(
                self._events,
                key=lambda e: (getattr(e, sort_field), e.id),
                reverse=descending,
            )
            return events[offset : offset + limit], len(events)

    # --- Settings ---

    def get_all_settings(self) -> List[Setting]:
        with self._lock:
            return [copy.copy(setting) for setting in self._settings.values()]

    def get_setting(self, name: str) -> Setting:
        with self._lock:
            setting = self._settings.get(name)
            if setting is None:
                raise SettingError(f"setting {name} is missing")
            return copy.copy(setting)

    def save_setting(self, setting: Setting) -> None:
        with self._lock:
            self._settings[setting.name] = copy.copy(setting)

    # --- DataFrame export ---

    def lease_stats_frame(self) -> pl.DataFrame:
        """
        Return all lease statistics as a DataFrame.

        Statistic columns differ between DHCPv4 and DHCPv6; absent ones are
        null in the rows of the other family.
        """
        rows = [record.to_row() for record in self.get_lease_stats()]
        if not rows:
            return pl.DataFrame()
        return _typed(pl.DataFrame(rows, infer_schema_length=None))

    def hosts_frame(self) -> pl.DataFrame:
        rows = [record.to_row() for record in self.get_hosts()]
        if not rows:
            return pl.DataFrame()
        return _typed(pl.DataFrame(rows, infer_schema_length=None))

    def events_frame(self) -> pl.DataFrame:
        with self._lock:
            events = list(self._events)
        if not events:
            return pl.DataFrame()
        return _typed(pl.DataFrame(
            {
                "id": [e.id for e in events],
                "created_at": [e.created_at for e in events],
                "level": [int(e.level) for e in events],
                "text": [e.text for e in events],
                "machine_id": [e.relations.machine for e in events],
                "app_id": [e.relations.app for e in events],
                "daemon_id": [e.relations.daemon for e in events],
                "subnet_id": [e.relations.subnet for e in events],
            }
        ))
