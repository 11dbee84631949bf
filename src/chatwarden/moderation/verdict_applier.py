"""
Single consumer that turns oracle verdicts into mutes and notices.

Worker tasks only classify; they hand ``(job, verdicts)`` pairs to this
applier through a queue. The applier is the only code that mutates
actor-visible state, so notices and mutes for one job are applied in job
order and never interleave with another job's.
"""

from __future__ import annotations

import asyncio
from typing import Tuple

from chatwarden.datatypes.chat_datatypes import BatchJob, ChatEntry, VerdictSet
from chatwarden.host.chat_host import ChatHost
from chatwarden.moderation.mute_store import MuteStore
from chatwarden.util.logger import get_logger

logger = get_logger("verdict_applier")

MUTED_NOTICE = "Inappropriate language detected. You have been muted."
REMOVED_NOTICE = "Your message was removed due to inappropriate content."

VerdictItem = Tuple[BatchJob, VerdictSet]


class VerdictApplier:
    """
    Consume classified batches from a queue and apply their verdicts.

    Attributes:
        queue (asyncio.Queue): Pending ``(job, verdicts)`` pairs.
        runner_task (asyncio.Task | None): The consumer loop while running.
    """

    def __init__(self, mute_store: MuteStore, host: ChatHost, *, delete_bad_messages: bool = True) -> None:
        self._mute_store = mute_store
        self._host = host
        self._delete_bad_messages = delete_bad_messages
        self.queue: asyncio.Queue[VerdictItem] = asyncio.Queue()
        self.runner_task: asyncio.Task[None] | None = None

    def ensure_runner(self) -> None:
        """Start the consumer loop on the running event loop if it is not active."""
        loop = asyncio.get_running_loop()
        if self.runner_task is None or self.runner_task.done():
            self.runner_task = loop.create_task(self.run(), name="chatwarden-verdict-applier")

    async def submit(self, job: BatchJob, verdicts: VerdictSet) -> None:
        await self.queue.put((job, verdicts))

    async def run(self) -> None:
        """Apply queued verdicts one batch at a time until cancelled."""
        while True:
            job, verdicts = await self.queue.get()
            try:
                self.apply(job, verdicts)
            finally:
                self.queue.task_done()

    def apply(self, job: BatchJob, verdicts: VerdictSet) -> int:
        """
        Mute and notify every actor whose entry was judged violating.

        Positions without a verdict are treated as ok. A host error on one
        entry is logged and does not stop the remaining entries.

        Returns:
            Number of entries acted upon.
        """
        acted = 0
        for index, entry in enumerate(job):
            if not verdicts.is_violating(index):
                continue
            try:
                self._punish(entry)
                acted += 1
            except Exception as exc:
                logger.error(
                    "[APPLIER] Failed to apply verdict for %s (%s): %s",
                    entry.actor_name,
                    entry.actor_id,
                    exc,
                    exc_info=True,
                )
        logger.debug("[APPLIER] Batch of %d entries applied, %d actors muted", len(job), acted)
        return acted

    def _punish(self, entry: ChatEntry) -> None:
        self._mute_store.mute(entry.actor_id)
        logger.info("[APPLIER] Blocked message from %s: %s", entry.actor_name, entry.message)

        if self._delete_bad_messages:
            self._host.retract_message(entry.actor_id, entry.message)

        if not self._host.is_online(entry.actor_id):
            logger.debug("[APPLIER] %s is offline; mute recorded without notice", entry.actor_name)
            return
        if self._delete_bad_messages:
            self._host.send_message(entry.actor_id, REMOVED_NOTICE)
        self._host.send_message(entry.actor_id, MUTED_NOTICE)

    async def join(self) -> None:
        """Wait until every queued batch has been applied."""
        await self.queue.join()

    async def shutdown(self) -> None:
        """Stop the consumer loop. Queued but unapplied batches are dropped."""
        if self.runner_task:
            self.runner_task.cancel()
            try:
                await self.runner_task
            except asyncio.CancelledError:
                pass
            finally:
                self.runner_task = None
