"""Server-sent events framing."""

import json

from ..models.events import Event


def format_sse(event: Event) -> str:
    """
    Render an event as one server-sent events message.

    Returns:
        ``id: <id>\\nevent: event\\ndata: <json>\\n\\n``
    """
    data = json.dumps(event.to_dict())
    return f"id: {event.id}\nevent: event\ndata: {data}\n\n"
