"""
Sweep Scheduler

Runs the expiration sweep on a background thread inside the web process.
Worker deployments use the Celery beat task instead.
"""

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class SweepScheduler:
    """
    Periodic sweep on a daemon thread.

    The first sweep runs synchronously in start() so that objects which
    expired while the service was down are gone before requests are served.
    """

    def __init__(self, sweep: Callable[[], Any], interval_seconds: float = 3600):
        """
        Args:
            sweep: Callable running one sweep
            interval_seconds: Pause between sweeps
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._sweep = sweep
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, run_immediately: bool = True) -> None:
        if self.is_running:
            return

        if run_immediately:
            self.run_once()

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="fileshare-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(f"Sweep scheduler started (every {self.interval_seconds}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("Sweep scheduler stopped")

    def run_once(self) -> None:
        try:
            self._sweep()
        except Exception as e:
            # A failed sweep must not kill the schedule
            logger.error(f"Sweep failed: {e}", exc_info=True)

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
