"""
BatchAccumulator: thread-safe collection of admitted chat entries.

Entries are appended by producer threads and swept out as a single BatchJob
once the configured batch size is reached. There is no time-based flush; a
trickle of messages below the threshold stays pending until more traffic
arrives or the pipeline drains it at shutdown.

Usage:
    accumulator = BatchAccumulator(batch_size=5)
    job = accumulator.offer(actor_id, "Steve", "hello")
    if job is not None:
        submit(job)
"""

from __future__ import annotations

import threading
from typing import List

from chatwarden.datatypes.chat_datatypes import ActorID, BatchJob, ChatEntry
from chatwarden.util.logger import get_logger

logger = get_logger("batch_accumulator")


class BatchAccumulator:
    """
    Owns the pending-entry queue and the size-triggered sweep.

    ``enqueue``, ``sweep`` and ``offer`` share one re-entrant lock, so no entry
    can be appended to a batch that is being swept and every entry ends up in
    exactly one BatchJob.

    Attributes:
        batch_size: Number of pending entries that triggers a flush.
    """

    def __init__(self, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size: int = batch_size
        self._pending: List[ChatEntry] = []
        self._lock = threading.RLock()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def enqueue(self, actor_id: ActorID, actor_name: str, message: str) -> bool:
        """
        Append a message to the pending queue.

        Returns:
            True if the queue length reached the flush threshold after the append.
        """
        with self._lock:
            entry = ChatEntry(
                actor_id=actor_id,
                actor_name=actor_name,
                message=message,
                enqueue_order=len(self._pending),
            )
            self._pending.append(entry)
            logger.debug(
                "[ACCUMULATOR] Queued message from %s (pending: %d/%d)",
                actor_name,
                len(self._pending),
                self.batch_size,
            )
            return len(self._pending) >= self.batch_size

    def sweep(self) -> BatchJob | None:
        """Atomically take every pending entry as a new BatchJob; None when nothing is pending."""
        with self._lock:
            if not self._pending:
                return None
            job = BatchJob(entries=tuple(self._pending))
            self._pending = []
        logger.debug("[ACCUMULATOR] Swept batch of %d entries", len(job))
        return job

    def offer(self, actor_id: ActorID, actor_name: str, message: str) -> BatchJob | None:
        """
        Enqueue, check the threshold and sweep inside one critical section.

        Returns:
            The swept BatchJob when this call filled the batch, else None.
        """
        with self._lock:
            if self.enqueue(actor_id, actor_name, message):
                return self.sweep()
            return None

    def drain(self) -> BatchJob | None:
        """Sweep whatever is pending regardless of the threshold (used at shutdown)."""
        job = self.sweep()
        if job is not None:
            logger.info("[ACCUMULATOR] Drained partial batch of %d entries", len(job))
        return job
