"""
Fixed-rate redraw tick for monitoring views.
"""

import threading
import time
from typing import Callable

from quake_archive.observability.logger import get_logger

logger = get_logger(__name__)


class RedrawTicker:
    """
    Calls a callback at a fixed rate on a daemon thread.

    The first tick fires immediately. Ticks are scheduled against the start
    time, so a slow callback does not shift later ticks; missed ticks are
    skipped rather than replayed. A callback that raises is logged and the
    ticker keeps running.

    Usage:
        with RedrawTicker(250, view.redraw):
            ...
    """

    def __init__(self, interval_ms: int, callback: Callable[[], None], name: str = "redraw-ticker"):
        """
        Initialize the ticker.

        Args:
            interval_ms: Period between ticks in milliseconds (supplied by the caller)
            callback: Zero-argument function run on every tick
            name: Thread name
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.interval = interval_ms / 1000.0
        self.callback = callback
        self.name = name
        self.ticks = 0
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Ticker {self.name} was already started")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self, timeout: float | None = None) -> None:
        """Stop ticking and wait for the thread to exit."""
        self._stopped.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _run(self) -> None:
        next_tick = time.monotonic()
        while not self._stopped.is_set():
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Redraw callback failed on {self.name}: {e}", exc_info=True)
            self.ticks += 1

            next_tick += self.interval
            now = time.monotonic()
            if next_tick < now:
                # Skip ticks the callback overran
                missed = int((now - next_tick) / self.interval) + 1
                next_tick += missed * self.interval
            self._stopped.wait(next_tick - now)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cancel()
        return False
