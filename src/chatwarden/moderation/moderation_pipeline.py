"""
Batched, asynchronous chat moderation.

Flow for one message:
1. ``handle_message`` screens it synchronously on the producing thread
   (muted actor, length limit, forbidden prefix). A rejection cancels the
   message and tells the actor why.
2. Admitted messages are offered to the BatchAccumulator. The call that fills
   a batch sweeps it and hands the BatchJob to the event loop with
   ``call_soon_threadsafe``; the producer never waits on the oracle.
3. A worker task (bounded by a semaphore) classifies the job through the
   oracle and passes the verdicts to the VerdictApplier.
4. The applier, the single consumer of verdicts, mutes and notifies actors in
   job order.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Set

from chatwarden.configuration.app_configuration import AppConfig
from chatwarden.datatypes.chat_datatypes import (
    ActorID,
    BatchJob,
    IngressDecision,
    IngressOutcome,
)
from chatwarden.host.chat_host import ChatHost
from chatwarden.moderation.batch_accumulator import BatchAccumulator
from chatwarden.moderation.mute_store import MuteStore
from chatwarden.moderation.oracle_client import ModerationOracleClient
from chatwarden.moderation.scan_quota import ScanQuota
from chatwarden.moderation.verdict_applier import VerdictApplier
from chatwarden.util.logger import get_logger

logger = get_logger("moderation_pipeline")

TOO_LONG_NOTICE = "Your message is too long."
FORBIDDEN_NOTICE = "Using prompts in chat is not allowed."


def muted_notice(minutes: int) -> str:
    return f"You are muted for another {minutes} minutes."


class ModerationPipeline:
    """
    Orchestrates ingress guards, batching, oracle calls and verdict application.

    Args:
        oracle: Client used to classify batches.
        host: Chat host that receives notices and retractions.
        mute_store: Per-actor mute state consulted on ingress and updated on violations.
        batch_size: Flush threshold of the accumulator.
        max_message_length: Longest message admitted.
        forbidden_prefix: Case-insensitive prefix that is always rejected; empty disables it.
        worker_count: Maximum number of concurrent oracle calls.
        scan_quota: Optional daily scan budget.
        delete_bad_messages: Ask the host to retract violating messages.
        shutdown_grace_seconds: How long shutdown waits for in-flight batches.
    """

    def __init__(
        self,
        oracle: ModerationOracleClient,
        host: ChatHost,
        mute_store: MuteStore,
        *,
        batch_size: int = 5,
        max_message_length: int = 200,
        forbidden_prefix: str = "/prompt",
        worker_count: int = 2,
        scan_quota: ScanQuota | None = None,
        delete_bad_messages: bool = True,
        shutdown_grace_seconds: float = 5.0,
    ) -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be >= 1, got {worker_count}")
        self._oracle = oracle
        self._host = host
        self.mute_store = mute_store
        self._accumulator = BatchAccumulator(batch_size)
        self._max_message_length = max_message_length
        self._forbidden_prefix = forbidden_prefix.lower()
        self._scan_quota = scan_quota
        self._shutdown_grace_seconds = shutdown_grace_seconds
        self._applier = VerdictApplier(mute_store, host, delete_bad_messages=delete_bad_messages)
        self._worker_slots = asyncio.Semaphore(worker_count)
        self._tasks: Set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._accepting = False
        self._closed = False
        self._scheduled = 0
        self._scheduled_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        host: ChatHost,
        oracle: ModerationOracleClient | None = None,
    ) -> "ModerationPipeline":
        """Build a pipeline from the ``ai_settings`` and ``moderation`` config sections."""
        ai_settings = config.ai_settings
        settings = config.moderation
        return cls(
            oracle or ModerationOracleClient.from_settings(ai_settings),
            host,
            MuteStore(settings.mute_minutes),
            batch_size=settings.batch_size,
            max_message_length=settings.max_message_length,
            forbidden_prefix=settings.forbidden_prefix,
            worker_count=ai_settings.worker_count,
            scan_quota=ScanQuota(settings.max_messages_per_day),
            delete_bad_messages=settings.delete_bad_messages,
            shutdown_grace_seconds=settings.shutdown_grace_seconds,
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def batch_size(self) -> int:
        return self._accumulator.batch_size

    @property
    def pending_count(self) -> int:
        return self._accumulator.pending_count

    @property
    def in_flight_count(self) -> int:
        return len(self._tasks)

    @property
    def is_running(self) -> bool:
        return self._accepting

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Bind to the running event loop and start the verdict applier."""
        self._loop = asyncio.get_running_loop()
        self._closed = False
        self._applier.ensure_runner()
        self._accepting = True
        logger.info(
            "[PIPELINE] Started | batch_size=%d | max_length=%d",
            self._accumulator.batch_size,
            self._max_message_length,
        )

    async def join(self) -> None:
        """Wait until every dispatched batch has been classified and applied."""
        while True:
            await asyncio.sleep(0)
            tasks = set(self._tasks)
            with self._scheduled_lock:
                scheduled = self._scheduled
            if not tasks and not scheduled:
                break
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
        await self._applier.join()

    async def shutdown(self, *, drain: bool = False) -> None:
        """
        Stop admitting work and wind down in-flight batches.

        Args:
            drain: Submit the pending partial batch before stopping instead of
                dropping it.
        """
        self._accepting = False
        # Jobs already handed over with call_soon_threadsafe spawn on this yield.
        await asyncio.sleep(0)
        if drain:
            job = self._accumulator.drain()
            if job is not None:
                self._spawn_worker(job)
        else:
            dropped = self._accumulator.sweep()
            if dropped is not None:
                logger.info("[PIPELINE] Dropping %d unscanned pending messages", len(dropped))
        self._closed = True

        in_flight = set(self._tasks)
        if in_flight:
            _, pending = await asyncio.wait(in_flight, timeout=self._shutdown_grace_seconds)
            if pending:
                logger.warning("[PIPELINE] Abandoning %d in-flight batches at shutdown", len(pending))
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)

        try:
            await asyncio.wait_for(self._applier.join(), timeout=self._shutdown_grace_seconds)
        except asyncio.TimeoutError:
            logger.warning("[PIPELINE] Verdict applier did not finish before shutdown")
        await self._applier.shutdown()
        await self._oracle.close()
        logger.info("[PIPELINE] Shutdown complete.")

    # ------------------------------------------------------------------
    # Ingress
    # ------------------------------------------------------------------

    def handle_message(self, actor_id: ActorID | str, actor_name: str, message: str) -> IngressDecision:
        """
        Screen one chat message and queue it for moderation.

        Safe to call from any thread; never blocks on the oracle.

        Returns:
            IngressDecision whose ``cancelled`` flag tells the host to suppress the message.
        """
        actor_id = ActorID(actor_id)

        rejection = self._screen(actor_id, message)
        if rejection is not None:
            logger.debug("[PIPELINE] %s from %s", rejection.outcome, actor_name)
            self._host.send_message(actor_id, rejection.notice or "")
            return rejection

        if not self._accepting:
            logger.debug("[PIPELINE] Not running; message from %s passes unscanned", actor_name)
            return IngressDecision(IngressOutcome.PASSED_UNSCANNED)

        if self._scan_quota is not None and not self._scan_quota.try_acquire():
            return IngressDecision(IngressOutcome.PASSED_UNSCANNED)

        job = self._accumulator.offer(actor_id, actor_name, message)
        if job is not None:
            self._dispatch(job)
        return IngressDecision(IngressOutcome.QUEUED)

    def _screen(self, actor_id: ActorID, message: str) -> IngressDecision | None:
        if self.mute_store.is_muted(actor_id):
            minutes = self.mute_store.remaining_minutes(actor_id)
            return IngressDecision(IngressOutcome.REJECTED_MUTED, muted_notice(minutes))

        if len(message) > self._max_message_length:
            return IngressDecision(IngressOutcome.REJECTED_TOO_LONG, TOO_LONG_NOTICE)

        if self._forbidden_prefix and message.lower().startswith(self._forbidden_prefix):
            return IngressDecision(IngressOutcome.REJECTED_FORBIDDEN, FORBIDDEN_NOTICE)

        return None

    # ------------------------------------------------------------------
    # Worker pool
    # ------------------------------------------------------------------

    def _dispatch(self, job: BatchJob) -> None:
        """Hand a swept job to the event loop from any thread."""
        loop = self._loop
        if loop is None:
            logger.warning("[PIPELINE] No event loop bound; dropping batch of %d", len(job))
            return
        with self._scheduled_lock:
            self._scheduled += 1
        try:
            loop.call_soon_threadsafe(self._spawn_scheduled, job)
        except RuntimeError as exc:
            with self._scheduled_lock:
                self._scheduled -= 1
            logger.warning("[PIPELINE] Event loop unavailable (%s); dropping batch of %d", exc, len(job))

    def _spawn_scheduled(self, job: BatchJob) -> None:
        with self._scheduled_lock:
            self._scheduled -= 1
        self._spawn_worker(job)

    def _spawn_worker(self, job: BatchJob) -> None:
        if self._closed:
            logger.info("[PIPELINE] Shutting down; batch of %d passes unmoderated", len(job))
            return
        task = asyncio.get_running_loop().create_task(self._run_job(job), name="chatwarden-batch")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_job(self, job: BatchJob) -> None:
        try:
            async with self._worker_slots:
                logger.debug("[PIPELINE] Classifying batch of %d", len(job))
                verdicts = await self._oracle.classify(job.messages)
            await self._applier.submit(job, verdicts)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[PIPELINE] Batch of %d failed; treated as ok: %s", len(job), exc, exc_info=True)
