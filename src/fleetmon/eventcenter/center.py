"""
Event center.

Events are handed off to a single writer thread through one FIFO queue.
The writer persists each event through the store and then dispatches the
stored event, which now carries its identifier and creation time, to the
broker. Events are therefore persisted and broadcast in the order they were
added. An event the store rejects is logged and dropped.
"""

import logging
import queue
import threading
from typing import Any, Iterator, Optional, Union

from ..models.events import Event, EventLevel
from ..storage import MonitorStore
from ..validation import ErrorSeverity, handle_error
from .broker import Broker, Subscriber
from .tags import create_event

logger = logging.getLogger(__name__)

_STOP = object()


class EventCenter:
    """
    Persists events and broadcasts them to live subscribers.

    The writer thread starts in the constructor. ``shutdown()`` lets the
    writer finish every event added before it was called.

    Attributes:
        store: Store the events are persisted in
        broker: Registry of live subscribers
        processed: Number of events persisted
        dropped: Number of events the store rejected
    """

    def __init__(self, store: MonitorStore, broker: Optional[Broker] = None):
        self.store = store
        self.broker = broker if broker is not None else Broker()
        self.processed = 0
        self.dropped = 0

        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._lock = threading.Lock()
        self._closing = False
        self._thread = threading.Thread(target=self._writer_loop, name="event-center", daemon=True)
        self._thread.start()
        logger.info("Started event center")

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def add_event(self, event: Event) -> None:
        """Queue an event for persistence and broadcast; never blocks."""
        with self._lock:
            if self._closing:
                logger.warning(f"Event center is shut down, discarding event: {event.text}")
                return
            self._queue.put(event)

    def add_info_event(self, text: str, *objects: Any) -> None:
        self.add_event(create_event(EventLevel.INFO, text, *objects))

    def add_warning_event(self, text: str, *objects: Any) -> None:
        self.add_event(create_event(EventLevel.WARNING, text, *objects))

    def add_error_event(self, text: str, *objects: Any) -> None:
        self.add_event(create_event(EventLevel.ERROR, text, *objects))

    def add_leveled_event(self, level: Union[EventLevel, int], text: str, *objects: Any) -> None:
        self.add_event(create_event(level, text, *objects))

    def register(self, client_id: Optional[str] = None) -> Subscriber:
        return self.broker.register(client_id)

    def unregister(self, subscriber: Subscriber) -> None:
        self.broker.unregister(subscriber)

    def stream(self, subscriber: Subscriber, poll_interval: float = 1.0) -> Iterator[str]:
        return self.broker.stream(subscriber, poll_interval=poll_interval)

    def _writer_loop(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            self._process(item)
        logger.debug("Event center writer finished")

    def _process(self, event: Event) -> None:
        try:
            stored = self.store.add_event(event)
        except Exception as e:
            self.dropped += 1
            handle_error(e, f"persisting event {event.text!r}", ErrorSeverity.ERROR, reraise=False, logger=logger)
            return
        self.processed += 1

        try:
            self.broker.dispatch_event(stored)
        except Exception as e:
            handle_error(e, f"dispatching event {stored.id}", ErrorSeverity.ERROR, reraise=False, logger=logger)

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting events, drain the queue and stop the writer.

        Safe to call more than once.

        Args:
            timeout: Maximum time to wait for the writer, None to wait until done
        """
        with self._lock:
            first = not self._closing
            self._closing = True
            if first:
                self._queue.put(_STOP)

        if first:
            logger.info("Stopping event center")
        if threading.current_thread() is self._thread:
            return

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning(f"Event center writer did not stop within {timeout}s")
        elif first:
            logger.info(f"Stopped event center, {self.processed} events persisted, {self.dropped} dropped")
            self.broker.close()
