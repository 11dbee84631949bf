"""Daily budget on the number of messages sent to the moderation oracle."""

from __future__ import annotations

import threading
import time
from typing import Callable

from chatwarden.util.logger import get_logger

logger = get_logger("scan_quota")

WINDOW_SECONDS = 24 * 60 * 60


class ScanQuota:
    """
    Counts scanned messages in a 24 hour window that restarts when it elapses.

    Once ``daily_limit`` messages have been admitted for scanning, further
    messages skip moderation until the window resets. A limit of 0 disables
    the cap.
    """

    def __init__(self, daily_limit: int, clock: Callable[[], float] = time.time) -> None:
        if daily_limit < 0:
            raise ValueError(f"daily_limit must be >= 0, got {daily_limit}")
        self.daily_limit = daily_limit
        self._clock = clock
        self._count = 0
        self._window_start = clock()
        self._exhausted_logged = False
        self._lock = threading.Lock()

    def _roll_window(self, now: float) -> None:
        if now - self._window_start >= WINDOW_SECONDS:
            self._count = 0
            self._window_start = now
            self._exhausted_logged = False

    @property
    def used(self) -> int:
        with self._lock:
            self._roll_window(self._clock())
            return self._count

    def try_acquire(self) -> bool:
        """Consume one scan slot; False once today's budget is spent."""
        with self._lock:
            self._roll_window(self._clock())
            if self.daily_limit and self._count >= self.daily_limit:
                if not self._exhausted_logged:
                    logger.warning(
                        "[SCAN QUOTA] Daily budget of %d scans reached; messages pass unscanned until reset",
                        self.daily_limit,
                    )
                    self._exhausted_logged = True
                return False
            self._count += 1
            return True
