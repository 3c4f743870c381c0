"""
Timer driven recurring task.

A Puller runs an action every ``interval`` seconds on its own thread until
it is shut down. The wait between ticks starts when the previous action
returns, so a slow action delays the next tick instead of piling ticks up,
and two invocations of the action never overlap.

Failures of the action are logged and otherwise ignored: the next tick
happens as scheduled. Shutdown wins over a pending tick, but an action that
is already running is allowed to finish.
"""

import logging
import threading
from typing import Any, Callable, Optional, Union

from ..models.results import CollectionOutcome
from ..validation import validate_positive_float

logger = logging.getLogger(__name__)

IntervalSource = Union[float, int, Callable[[], float]]


class Puller:
    """
    Runs an action periodically on a background thread.

    The thread starts in the constructor. ``shutdown()`` blocks until the
    thread has exited.

    Attributes:
        name: Name used in logs and for the thread
        ticks: Number of completed invocations of the action
        last_outcome: Value returned by the most recent successful invocation
    """

    def __init__(self, name: str, interval: IntervalSource, action: Callable[[], Any]):
        """
        Args:
            name: Name of the puller
            interval: Seconds between ticks, or a callable returning them;
                a callable is re-evaluated before every wait
            action: Zero-argument callable invoked on each tick

        Raises:
            ValidationError: If the initial interval is not positive
        """
        self.name = name
        self._interval = interval
        self._action = action
        self._last_interval = self._current_interval()

        self.ticks = 0
        self.last_outcome: Any = None
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._puller_loop,
            name=f"{name}-puller",
            daemon=True,
        )

        logger.info(f"Starting {self.name} puller")
        self._thread.start()
        logger.info(f"Started {self.name} puller, interval {self._last_interval}s")

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def _current_interval(self) -> float:
        value = self._interval() if callable(self._interval) else self._interval
        return validate_positive_float(value, field_name=f"{self.name} puller interval", exclusive_min=True)

    def _next_interval(self) -> float:
        try:
            self._last_interval = self._current_interval()
        except Exception as e:
            logger.error(
                f"Cannot determine {self.name} puller interval, keeping {self._last_interval}s: {e}"
            )
        return self._last_interval

    def _puller_loop(self) -> None:
        try:
            while not self._stop_event.wait(self._next_interval()):
                self._tick()
        finally:
            logger.debug(f"{self.name} puller loop finished")

    def _tick(self) -> None:
        try:
            outcome = self._action()
        except Exception as e:
            logger.error(f"Error in {self.name} puller action: {e}", exc_info=True)
            return
        finally:
            self.ticks += 1

        self.last_outcome = outcome
        if isinstance(outcome, CollectionOutcome) and not outcome.ok:
            logger.error(f"Some errors were encountered in {self.name} puller: {outcome}")
        else:
            logger.debug(f"{self.name} puller tick finished: {outcome}")

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop the puller and wait for its thread to exit.

        Safe to call more than once. When called from the action itself the
        stop is requested without waiting.

        Args:
            timeout: Maximum time to wait, None to wait until the thread exits
        """
        if self._stop_event.is_set() and not self._thread.is_alive():
            return

        logger.info(f"Stopping {self.name} puller")
        self._stop_event.set()
        if threading.current_thread() is self._thread:
            return

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning(f"{self.name} puller did not stop within {timeout}s")
        else:
            logger.info(f"Stopped {self.name} puller")
