"""
Fan-out of persisted events to live subscribers.

Every subscriber owns a bounded queue. Dispatch snapshots the subscriber
set and puts the event into each queue without blocking; a subscriber whose
queue is full misses the event while the others still receive it. A
subscriber only sees events dispatched after it registered.
"""

import logging
import queue
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterator, Optional, Set

from ..models.events import Event
from ..validation import validate_positive_integer
from .sse import format_sse

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100

_STOP = object()


@dataclass(eq=False)
class Subscriber:
    """
    A live subscription.

    Attributes:
        client_id: Identifier used in logs
        queue: Events waiting to be streamed to the client
        dropped: Number of events lost because the queue was full
    """

    client_id: str
    queue: "queue.Queue[Any]"
    dropped: int = 0
    closed: threading.Event = field(default_factory=threading.Event)


class Broker:
    """Registry of live subscribers. Thread-safe."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.queue_size = validate_positive_integer(queue_size, field_name="subscriber_queue_size")
        self._subscribers: Set[Subscriber] = set()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def get_subscribers(self) -> FrozenSet[Subscriber]:
        """Snapshot of the current subscribers, no lock held on return."""
        with self._lock:
            return frozenset(self._subscribers)

    def register(self, client_id: Optional[str] = None) -> Subscriber:
        """Create and register a new subscriber."""
        subscriber = Subscriber(
            client_id=client_id or uuid.uuid4().hex,
            queue=queue.Queue(maxsize=self.queue_size),
        )
        with self._lock:
            self._subscribers.add(subscriber)
        logger.info(f"Registered event subscriber {subscriber.client_id}")
        return subscriber

    def unregister(self, subscriber: Subscriber) -> None:
        """Remove a subscriber and end its stream. Unknown subscribers are ignored."""
        with self._lock:
            if subscriber not in self._subscribers:
                return
            self._subscribers.discard(subscriber)

        subscriber.closed.set()
        try:
            subscriber.queue.put_nowait(_STOP)
        except queue.Full:
            # the stream notices the closed flag on its next poll
            pass
        logger.info(f"Unregistered event subscriber {subscriber.client_id}")

    def dispatch_event(self, event: Event) -> int:
        """
        Offer an event to every subscriber without blocking.

        Returns:
            Number of subscribers the event was queued for
        """
        delivered = 0
        for subscriber in self.get_subscribers():
            try:
                subscriber.queue.put_nowait(event)
                delivered += 1
            except queue.Full:
                subscriber.dropped += 1
                logger.debug(f"Queue of subscriber {subscriber.client_id} is full, dropping event {event.id}")
        return delivered

    def stream(self, subscriber: Subscriber, poll_interval: float = 1.0) -> Iterator[str]:
        """
        Yield the subscriber's events as SSE messages until it is unregistered.

        Events queued before the subscriber was unregistered are still
        delivered. The subscriber is unregistered when the consumer stops
        iterating or fails while handling a message.

        Args:
            subscriber: A registered subscriber
            poll_interval: Seconds to wait on an empty queue before checking
                the closed flag
        """
        try:
            while True:
                try:
                    item = subscriber.queue.get(timeout=poll_interval)
                except queue.Empty:
                    # unregister could not queue the stop marker into a full queue
                    if subscriber.closed.is_set():
                        break
                    continue
                if item is _STOP:
                    break
                yield format_sse(item)
        finally:
            self.unregister(subscriber)

    def close(self) -> None:
        """Unregister every subscriber."""
        for subscriber in self.get_subscribers():
            self.unregister(subscriber)
