"""
Event data models.

An event is a timestamped, severity-levelled notification. Its identifier
and creation time are assigned by the store when it is persisted; apart
from that it never changes after creation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, Optional


class EventLevel(IntEnum):
    """Event severity. The numeric values are what subscribers receive."""

    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class Relations:
    """Identifiers of the entities an event refers to."""

    machine: Optional[int] = None
    app: Optional[int] = None
    daemon: Optional[int] = None
    subnet: Optional[int] = None

    def to_dict(self) -> Dict[str, int]:
        """Return only the relations which are set."""
        return {
            name: value
            for name, value in (
                ("machine", self.machine),
                ("app", self.app),
                ("daemon", self.daemon),
                ("subnet", self.subnet),
            )
            if value is not None
        }


@dataclass(frozen=True)
class Event:
    """
    A notification record.

    Attributes:
        text: Message with entity placeholders already replaced by tags
        level: Severity of the event
        relations: Entities the event refers to
        id: Identifier assigned at persistence, None before
        created_at: Creation time assigned at persistence, None before
    """

    text: str
    level: EventLevel = EventLevel.INFO
    relations: Relations = field(default_factory=Relations)
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def persisted(self) -> bool:
        return self.id is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the event into the record delivered to subscribers."""
        return {
            "id": self.id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "level": int(self.level),
            "text": self.text,
            "relations": self.relations.to_dict(),
        }
