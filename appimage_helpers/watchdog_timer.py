"""A resettable one-shot timer."""

from __future__ import annotations

import threading
from collections.abc import Callable


class Watchdog:
    """Calls *callback* once after *interval* seconds; kicking it restarts the delay.

    Kicking after the callback has already run arms it again.
    """

    def __init__(self, interval: float, callback: Callable[[], object]) -> None:
        self._interval = interval
        self._callback = callback
        self._lock = threading.Lock()
        self._timer = self._start()

    def _start(self) -> threading.Timer:
        timer = threading.Timer(self._interval, self._callback)
        timer.daemon = True
        timer.start()
        return timer

    def stop(self) -> None:
        """Cancel the pending call, if any."""
        with self._lock:
            self._timer.cancel()

    def kick(self) -> None:
        """Restart the delay from now."""
        with self._lock:
            self._timer.cancel()
            self._timer = self._start()