"""
Event text enrichment.

Event texts refer to entities through placeholders such as ``{machine}``.
``create_event`` replaces each placeholder with a tag describing the entity
and records the entity's identifier in the event relations, e.g.::

    create_event(EventLevel.WARNING, "Machine {machine} unreachable", machine)

yields the text ``Machine <machine id="5" address="10.0.0.1" hostname="">
unreachable`` with relations ``machine=5``.
"""

import logging
from typing import Any, Callable, Dict, Tuple, Union

from ..models.events import Event, EventLevel, Relations
from ..models.inventory import App, Daemon, Machine, Subnet

logger = logging.getLogger(__name__)


def machine_tag(machine: Machine) -> str:
    return f'<machine id="{machine.id}" address="{machine.address}" hostname="{machine.hostname}">'


def app_tag(app: App) -> str:
    return f'<app id="{app.id}" type="{app.type}" version="{app.version}">'


def daemon_tag(daemon: Daemon) -> str:
    return f'<daemon id="{daemon.id}" name="{daemon.name}" appId="{daemon.app_id}" appType="{daemon.app_type}">'


def subnet_tag(subnet: Subnet) -> str:
    return f'<subnet id="{subnet.id}" prefix="{subnet.prefix}">'


# (type, placeholder and relation name, tag builder), in substitution order
_TAGGERS: Tuple[Tuple[type, str, Callable[[Any], str]], ...] = (
    (Daemon, "daemon", daemon_tag),
    (App, "app", app_tag),
    (Machine, "machine", machine_tag),
    (Subnet, "subnet", subnet_tag),
)


def create_event(level: Union[EventLevel, int], text: str, *objects: Any) -> Event:
    """
    Build an event, replacing entity placeholders in its text.

    When several objects of the same kind are given, the last one is used
    for both the text and the relations. Objects of other types are ignored.

    Args:
        level: Severity of the event
        text: Message, possibly containing ``{machine}``, ``{app}``,
            ``{daemon}`` or ``{subnet}``
        *objects: Entities the event refers to

    Returns:
        An unpersisted Event
    """
    selected: Dict[str, Any] = {}
    for obj in objects:
        for cls, kind, _ in _TAGGERS:
            if isinstance(obj, cls):
                if kind in selected:
                    logger.debug(f"Event refers to more than one {kind}, suspect {selected[kind]!r} replaced by {obj!r}")
                selected[kind] = obj
                break
        else:
            logger.debug(f"Ignoring object of unsupported type {type(obj).__name__} in event")

    relations: Dict[str, int] = {}
    for _, kind, tagger in _TAGGERS:
        obj = selected.get(kind)
        if obj is None:
            continue
        text = text.replace("{" + kind + "}", tagger(obj))
        relations[kind] = obj.id

    return Event(text=text, level=EventLevel(level), relations=Relations(**relations))
