"""Tests for mute_store module."""

import pytest

from chatwarden.datatypes.chat_datatypes import ActorID
from chatwarden.moderation.mute_store import MuteStore


class TestMuteStore:
    """Tests for MuteStore class."""

    def test_negative_duration_rejected(self, clock):
        with pytest.raises(ValueError):
            MuteStore(-1, clock=clock)

    def test_unknown_actor_not_muted(self, clock):
        store = MuteStore(15, clock=clock)

        assert store.is_muted(ActorID("nobody")) is False
        assert store.remaining_minutes(ActorID("nobody")) == 0
        assert store.get(ActorID("nobody")) is None

    def test_muted_immediately_after_mute(self, clock):
        store = MuteStore(15, clock=clock)
        actor = ActorID("steve")

        record = store.mute(actor)

        assert record.mute_until == clock.now + 15 * 60
        assert store.is_muted(actor) is True
        assert store.remaining_minutes(actor) == 15

    def test_expired_record_is_evicted_on_read(self, clock):
        store = MuteStore(15, clock=clock)
        actor = ActorID("steve")
        store.mute(actor)

        clock.advance(15 * 60)

        assert store.is_muted(actor) is False
        assert store._records == {}
        assert store.remaining_minutes(actor) == 0

    def test_remaining_minutes_rounds_up_and_never_increases(self, clock):
        store = MuteStore(15, clock=clock)
        actor = ActorID("steve")
        store.mute(actor)

        readings = []
        for _ in range(17):
            readings.append(store.remaining_minutes(actor))
            clock.advance(59)

        assert readings == sorted(readings, reverse=True)
        assert readings[0] == 15
        assert readings[-1] == 0

    def test_five_minutes_remaining(self, clock):
        store = MuteStore(15, clock=clock)
        actor = ActorID("steve")
        store.mute(actor)

        clock.advance(10 * 60)

        assert store.remaining_minutes(actor) == 5

    def test_mute_overwrites_existing_record(self, clock):
        store = MuteStore(15, clock=clock)
        actor = ActorID("steve")
        store.mute(actor)
        clock.advance(10 * 60)

        store.mute(actor)

        assert store.remaining_minutes(actor) == 15

    def test_unmute(self, clock):
        store = MuteStore(15, clock=clock)
        actor = ActorID("steve")
        store.mute(actor)

        assert store.unmute(actor) is True
        assert store.is_muted(actor) is False
        assert store.unmute(actor) is False

    def test_mutes_are_per_actor(self, clock):
        store = MuteStore(15, clock=clock)
        store.mute(ActorID("a"))

        assert store.is_muted(ActorID("a")) is True
        assert store.is_muted(ActorID("b")) is False

    def test_active_count_skips_expired(self, clock):
        store = MuteStore(1, clock=clock)
        store.mute(ActorID("a"))
        clock.advance(30)
        store.mute(ActorID("b"))

        assert store.active_count() == 2
        clock.advance(45)
        assert store.active_count() == 1
