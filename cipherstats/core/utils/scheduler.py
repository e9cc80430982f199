"""Repeating background task used for periodic analytics refreshes."""

import threading
from typing import Callable, Optional

from .logging_utils import get_logger

logger = get_logger(__name__)


class RefreshScheduler:
    """Calls a task every ``interval_ms`` milliseconds on a daemon thread.

    The task runs to completion once started; ``stop()`` only prevents the
    next tick. Exceptions raised by the task are logged and the loop keeps
    going. Each started worker owns its stop event, so a worker that outlives
    a timed-out ``stop()`` still exits after its current task.

    Examples:
        >>> scheduler = RefreshScheduler(engine.refresh, interval_ms=60000)
        >>> scheduler.start()
        >>> scheduler.stop()
    """

    def __init__(self, task: Callable[[], object], interval_ms: int, name: str = "AnalyticsRefresh"):
        if interval_ms <= 0:
            raise ValueError(f"Refresh interval {interval_ms} must be positive")

        self.task = task
        self.interval_ms = interval_ms
        self.name = name
        self.ticks = 0

        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread (no-op when already running)."""
        if self.is_running:
            return

        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._worker, args=(self._stop_event,), name=self.name, daemon=True
        )
        self._thread.start()
        logger.debug(f"Started {self.name} scheduler ({self.interval_ms} ms)")

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the worker to stop and wait for it to exit."""
        if not self._thread:
            return

        self._stop_event.set()
        if self._thread is threading.current_thread():
            # Called from the task itself; the loop exits after it returns
            self._thread = None
            return

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning(f"{self.name} scheduler did not stop gracefully")
        else:
            logger.debug(f"Stopped {self.name} scheduler")

        self._thread = None

    def _worker(self, stop_event: threading.Event) -> None:
        """Worker loop: wait one interval, then run the task."""
        while not stop_event.wait(timeout=self.interval_ms / 1000.0):
            try:
                self.task()
                self.ticks += 1
            except Exception as e:
                logger.error(f"Error in {self.name} scheduler task: {e}")
