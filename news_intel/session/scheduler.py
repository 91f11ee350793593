"""Cancellable recurring task used for the feed auto-refresh."""
import threading
from typing import Callable, Optional

from news_intel.logging_cfg.logger import setup_logger

logger = setup_logger()


class RecurringTask:
    """Runs ``callback`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str = 'auto-refresh'):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"Scheduled {self.name} every {self.interval:.0f}s")

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                # A failed run must not end the schedule
                logger.error(f"{self.name} run failed: {e}", exc_info=True)

    def cancel(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the schedule. No callback starts after this returns."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
