"""
Abstract base class for the monitoring store.

The store is the collaborator through which the server reads its inventory
and writes everything it collects: lease statistics, host reservations,
events and settings. Implementations must be safe for concurrent use by
several collectors and the event center writer; no transaction spans more
than one call.

Typed setting accessors are implemented here on top of three primitive
operations, so every backend enforces the same type rules.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..exceptions import SettingError
from ..models.events import Event
from ..models.inventory import App, Machine
from ..models.records import HostRecord, LeaseStatsRecord
from .settings import Setting, SettingValType, format_bool, parse_bool


class MonitorStore(ABC):
    """Abstract base class for store implementations."""

    # --- Inventory ---

    @abstractmethod
    def add_machine(self, machine: Machine) -> Machine:
        """
        Add a machine, assigning an identifier if it has none.

        Returns:
            The stored machine
        """
        pass

    @abstractmethod
    def add_app(self, app: App) -> App:
        """
        Add an application, assigning identifiers to it and its daemons.

        Returns:
            The stored application
        """
        pass

    @abstractmethod
    def get_apps_by_type(self, app_type: str) -> List[App]:
        """
        Return all applications of the given type.

        Raises:
            StorageError: If the store cannot be read
        """
        pass

    # --- Collected data ---

    @abstractmethod
    def upsert_lease_stats(self, app_id: int, records: List[LeaseStatsRecord]) -> None:
        """Insert or replace lease statistics of an application."""
        pass

    @abstractmethod
    def get_lease_stats(self, app_id: Optional[int] = None) -> List[LeaseStatsRecord]:
        """Return stored lease statistics, optionally of one application."""
        pass

    @abstractmethod
    def upsert_hosts(self, app_id: int, records: List[HostRecord]) -> None:
        """Insert or replace host reservations of an application."""
        pass

    @abstractmethod
    def get_hosts(self, app_id: Optional[int] = None) -> List[HostRecord]:
        """Return stored host reservations, optionally of one application."""
        pass

    # --- Events ---

    @abstractmethod
    def add_event(self, event: Event) -> Event:
        """
        Persist an event.

        Returns:
            A copy of the event carrying its assigned id and creation time

        Raises:
            StorageError: If the event could not be written
        """
        pass

    @abstractmethod
    def get_events_by_page(
        self,
        offset: int = 0,
        limit: int = 10,
        sort_field: str = "created_at",
        descending: bool = True,
    ) -> Tuple[List[Event], int]:
        """
        Return one page of events and the total number of events.

        Args:
            offset: Number of events to skip
            limit: Maximum number of events returned
            sort_field: ``created_at``, ``id`` or ``level``
            descending: Sort direction
        """
        pass

    # --- Settings primitives ---

    @abstractmethod
    def get_all_settings(self) -> List[Setting]:
        pass

    @abstractmethod
    def get_setting(self, name: str) -> Setting:
        """
        Raises:
            SettingError: If the setting does not exist
        """
        pass

    @abstractmethod
    def save_setting(self, setting: Setting) -> None:
        """Insert or update a setting."""
        pass

    # --- Settings helpers ---

    def initialize_settings(self, defaults: List[Setting]) -> None:
        """
        Insert the default settings which are not yet present.

        Settings that already exist keep their current value.
        """
        present = {setting.name for setting in self.get_all_settings()}
        for setting in defaults:
            if setting.name in present:
                continue
            self.save_setting(Setting(setting.name, setting.val_type, setting.value))

    def _get_typed_setting(self, name: str, val_type: SettingValType) -> Setting:
        setting = self.get_setting(name)
        if setting.val_type != val_type:
            raise SettingError(
                f"not matching setting type of {name} "
                f"({int(setting.val_type)} vs {int(val_type)} expected)"
            )
        return setting

    def get_setting_int(self, name: str) -> int:
        setting = self._get_typed_setting(name, SettingValType.INT)
        try:
            return int(setting.value)
        except ValueError as e:
            raise SettingError(f"setting {name} holds a malformed integer: {e}")

    def get_setting_bool(self, name: str) -> bool:
        setting = self._get_typed_setting(name, SettingValType.BOOL)
        try:
            return parse_bool(setting.value)
        except ValueError as e:
            raise SettingError(f"setting {name} holds a malformed boolean: {e}")

    def get_setting_str(self, name: str) -> str:
        return self._get_typed_setting(name, SettingValType.STR).value

    def get_setting_passwd(self, name: str) -> str:
        return self._get_typed_setting(name, SettingValType.PASSWD).value

    def set_setting_int(self, name: str, value: int) -> None:
        setting = self._get_typed_setting(name, SettingValType.INT)
        self.save_setting(Setting(name, setting.val_type, str(int(value))))

    def set_setting_bool(self, name: str, value: bool) -> None:
        setting = self._get_typed_setting(name, SettingValType.BOOL)
        self.save_setting(Setting(name, setting.val_type, format_bool(value)))

    def set_setting_str(self, name: str, value: str) -> None:
        setting = self._get_typed_setting(name, SettingValType.STR)
        self.save_setting(Setting(name, setting.val_type, value))

    def set_setting_passwd(self, name: str, value: str) -> None:
        setting = self._get_typed_setting(name, SettingValType.PASSWD)
        self.save_setting(Setting(name, setting.val_type, value))
