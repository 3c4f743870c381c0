"""
Typed server settings held by the store.

Settings are kept as strings together with a declared value type. Reading
or writing a setting through an accessor of a different type is an error,
which protects against, e.g., a password being read back as an integer.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List


class SettingValType(IntEnum):
    """Declared type of a setting value."""

    INT = 1
    BOOL = 2
    STR = 3
    PASSWD = 4


@dataclass
class Setting:
    """A named setting with its declared type and string encoded value."""

    name: str
    val_type: SettingValType
    value: str


STATS_PULLER_INTERVAL = "kea_stats_puller_interval"
HOSTS_PULLER_INTERVAL = "kea_hosts_puller_interval"


def default_settings(stats_interval: int = 60, hosts_interval: int = 60) -> List[Setting]:
    """
    Settings every store must hold; missing ones are inserted at startup.

    Args:
        stats_interval: Initial lease stats puller interval in seconds
        hosts_interval: Initial hosts puller interval in seconds
    """
    return [
        Setting(STATS_PULLER_INTERVAL, SettingValType.INT, str(stats_interval)),
        Setting(HOSTS_PULLER_INTERVAL, SettingValType.INT, str(hosts_interval)),
    ]


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def parse_bool(text: str) -> bool:
    """Parse the boolean spellings accepted for settings."""
    lowered = text.strip().lower()
    if lowered in ("1", "t", "true"):
        return True
    if lowered in ("0", "f", "false"):
        return False
    raise ValueError(f"invalid boolean value {text!r}")
