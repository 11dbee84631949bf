"""
Pytest configuration and fixtures for Chatwarden tests.
"""

import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add src directory to path so imports work without an editable install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from chatwarden.datatypes.chat_datatypes import ActorID  # noqa: E402


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHost:
    """ChatHost that records every call instead of talking to real actors."""

    def __init__(self, offline: tuple = ()) -> None:
        self.sent: List[Tuple[ActorID, str]] = []
        self.retracted: List[Tuple[ActorID, str]] = []
        self.offline = {ActorID(a) for a in offline}

    def send_message(self, actor_id: ActorID, text: str) -> None:
        self.sent.append((actor_id, text))

    def is_online(self, actor_id: ActorID) -> bool:
        return actor_id not in self.offline

    def retract_message(self, actor_id: ActorID, message: str) -> None:
        self.retracted.append((actor_id, message))

    def messages_for(self, actor_id: str) -> List[str]:
        return [text for aid, text in self.sent if aid == actor_id]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def host() -> RecordingHost:
    return RecordingHost()
