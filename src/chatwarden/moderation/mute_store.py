"""
In-memory, per-actor mute state with lazy expiry.

There is no timer thread: a record stops counting as muted once its
``mute_until`` has passed, and it is removed the first time it is read after
that point.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Dict

from chatwarden.datatypes.chat_datatypes import ActorID, MuteRecord
from chatwarden.util.logger import get_logger

logger = get_logger("mute_store")

Clock = Callable[[], float]


class MuteStore:
    """
    Map of actor -> mute expiry.

    Args:
        mute_minutes: Duration applied by :meth:`mute`.
        clock: Returns the current epoch time in seconds; injectable for tests.
    """

    def __init__(self, mute_minutes: float, clock: Clock = time.time) -> None:
        if mute_minutes < 0:
            raise ValueError(f"mute_minutes must be >= 0, got {mute_minutes}")
        self.mute_seconds: float = mute_minutes * 60.0
        self._clock = clock
        self._records: Dict[ActorID, MuteRecord] = {}
        self._lock = threading.Lock()

    def mute(self, actor_id: ActorID) -> MuteRecord:
        """Mute ``actor_id`` for the configured duration, replacing any existing mute."""
        record = MuteRecord(actor_id=actor_id, mute_until=self._clock() + self.mute_seconds)
        with self._lock:
            self._records[actor_id] = record
        logger.info("[MUTE STORE] Muted %s for %.0f minutes", actor_id, self.mute_seconds / 60)
        return record

    def unmute(self, actor_id: ActorID) -> bool:
        with self._lock:
            removed = self._records.pop(actor_id, None) is not None
        if removed:
            logger.info("[MUTE STORE] Unmuted %s", actor_id)
        return removed

    def _live_record(self, actor_id: ActorID) -> MuteRecord | None:
        # Caller holds the lock.
        record = self._records.get(actor_id)
        if record is None:
            return None
        if record.mute_until <= self._clock():
            del self._records[actor_id]
            logger.debug("[MUTE STORE] Mute for %s expired", actor_id)
            return None
        return record

    def get(self, actor_id: ActorID) -> MuteRecord | None:
        with self._lock:
            return self._live_record(actor_id)

    def is_muted(self, actor_id: ActorID) -> bool:
        with self._lock:
            return self._live_record(actor_id) is not None

    def remaining_minutes(self, actor_id: ActorID) -> int:
        """Whole minutes left on the mute, rounded up; 0 when not muted."""
        with self._lock:
            record = self._live_record(actor_id)
            if record is None:
                return 0
            remaining = record.mute_until - self._clock()
        return max(0, math.ceil(remaining / 60.0))

    def active_count(self) -> int:
        """Number of unexpired mutes; evicts expired records on the way."""
        with self._lock:
            return sum(1 for actor_id in list(self._records) if self._live_record(actor_id) is not None)
