"""
Event handling for the monitoring server.

- EventCenter: ordered persistence and broadcast of events
- Broker: live subscribers and their bounded queues
- create_event: placeholder replacement and relations
- format_sse: server-sent events framing
"""

from .broker import Broker, Subscriber
from .center import EventCenter
from .sse import format_sse
from .tags import app_tag, create_event, daemon_tag, machine_tag, subnet_tag

__all__ = [
    "Broker",
    "Subscriber",
    "EventCenter",
    "format_sse",
    "create_event",
    "app_tag",
    "daemon_tag",
    "machine_tag",
    "subnet_tag",
]
