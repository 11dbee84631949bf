"""Tests for verdict_applier module."""

import pytest

from chatwarden.datatypes.chat_datatypes import ActorID, BatchJob, ChatEntry, VerdictSet
from chatwarden.moderation.mute_store import MuteStore
from chatwarden.moderation.verdict_applier import MUTED_NOTICE, VerdictApplier


def _job(*actors: str) -> BatchJob:
    return BatchJob(
        entries=tuple(
            ChatEntry(actor_id=ActorID(a), actor_name=a.title(), message=f"from {a}", enqueue_order=i)
            for i, a in enumerate(actors)
        )
    )


class TestVerdictApplier:
    """Tests for VerdictApplier class."""

    def test_apply_mutes_only_violating_positions(self, host, clock):
        store = MuteStore(15, clock=clock)
        applier = VerdictApplier(store, host, delete_bad_messages=False)

        acted = applier.apply(_job("a", "b", "c"), VerdictSet({0: False, 1: True}))

        assert acted == 1
        assert store.is_muted(ActorID("b")) is True
        assert store.is_muted(ActorID("c")) is False
        assert host.sent == [(ActorID("b"), MUTED_NOTICE)]

    def test_empty_verdicts_do_nothing(self, host, clock):
        store = MuteStore(15, clock=clock)
        applier = VerdictApplier(store, host)

        assert applier.apply(_job("a", "b"), VerdictSet.empty()) == 0
        assert host.sent == [] and host.retracted == []

    def test_host_failure_does_not_stop_remaining_entries(self, host, clock):
        store = MuteStore(15, clock=clock)
        calls = []

        def flaky_send(actor_id, text):
            calls.append(actor_id)
            if actor_id == "a":
                raise RuntimeError("connection reset")

        host.send_message = flaky_send
        applier = VerdictApplier(store, host, delete_bad_messages=False)

        acted = applier.apply(_job("a", "b"), VerdictSet({0: True, 1: True}))

        assert acted == 1
        assert calls == [ActorID("a"), ActorID("b")]
        assert store.is_muted(ActorID("a")) is True
        assert store.is_muted(ActorID("b")) is True

    @pytest.mark.asyncio
    async def test_runner_consumes_queue(self, host, clock):
        store = MuteStore(15, clock=clock)
        applier = VerdictApplier(store, host)
        applier.ensure_runner()

        await applier.submit(_job("a"), VerdictSet({0: True}))
        await applier.join()

        assert store.is_muted(ActorID("a")) is True
        await applier.shutdown()
        assert applier.runner_task is None
