"""
Chat and batch types for the moderation pipeline.

Key Features:
- `ActorID`: Opaque, hashable identifier of the actor who sent a message.
- `ChatEntry`: One admitted chat message, frozen once queued.
- `BatchJob`: Ordered, immutable group of entries swept together; position is
  the correlation key between entries and verdicts.
- `VerdictSet`: Position -> violating flag; may be shorter than its job.
- `MuteRecord`: Active mute of one actor.
- `IngressDecision`: Synchronous result of screening a message, carrying the
  cancel signal for the host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple, Union


class ActorID:
    """
    Type-safe wrapper for actor identifiers.

    Hosts identify actors differently (UUIDs, snowflakes, nicknames), so the
    value is stored as an opaque string. An ActorID compares equal to another
    ActorID or a plain string with the same value.

    Example:
        >>> ActorID("steve") == "steve"
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "ActorID"]) -> None:
        if isinstance(value, ActorID):
            self._value = value._value
        elif isinstance(value, (str, int)) and not isinstance(value, bool):
            self._value = str(value).strip()
        else:
            raise ValueError(f"Cannot create ActorID from {type(value).__name__}: {value}")
        if not self._value:
            raise ValueError("ActorID cannot be empty")

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"ActorID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ActorID):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


@dataclass(frozen=True, slots=True)
class ChatEntry:
    """An admitted chat message waiting for, or undergoing, moderation.

    Attributes:
        actor_id (ActorID): Actor who sent the message.
        actor_name (str): Display name, used for logging only.
        message (str): Raw message text.
        enqueue_order (int): Position of the entry in the batch it is swept into.
    """

    actor_id: ActorID
    actor_name: str
    message: str
    enqueue_order: int


@dataclass(frozen=True, slots=True)
class BatchJob:
    """An ordered, fixed group of entries swept out of the accumulator at once."""

    entries: Tuple[ChatEntry, ...]

    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(entry.message for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ChatEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> ChatEntry:
        return self.entries[index]


@dataclass(frozen=True, slots=True)
class VerdictSet:
    """Oracle verdicts keyed by batch position.

    Positions that are not present (truncated reply, failed call) read as
    non-violating.
    """

    verdicts: Mapping[int, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "verdicts", MappingProxyType(dict(self.verdicts)))

    @classmethod
    def empty(cls) -> "VerdictSet":
        """Fail-open result: every position is non-violating."""
        return cls({})

    def is_violating(self, index: int) -> bool:
        return self.verdicts.get(index, False)

    def violating_positions(self) -> list[int]:
        return sorted(i for i, bad in self.verdicts.items() if bad)

    def __len__(self) -> int:
        return len(self.verdicts)


@dataclass(frozen=True, slots=True)
class MuteRecord:
    """Active mute; ``mute_until`` is an absolute epoch timestamp in seconds."""

    actor_id: ActorID
    mute_until: float


class IngressOutcome(Enum):
    """Result of screening one message on the producing path."""

    QUEUED = "queued"
    PASSED_UNSCANNED = "passed_unscanned"
    REJECTED_MUTED = "rejected_muted"
    REJECTED_TOO_LONG = "rejected_too_long"
    REJECTED_FORBIDDEN = "rejected_forbidden"

    def __str__(self) -> str:
        return self.value

    @property
    def is_rejection(self) -> bool:
        return self.value.startswith("rejected")


@dataclass(frozen=True, slots=True)
class IngressDecision:
    """Outcome of ``ModerationPipeline.handle_message`` plus the notice sent to the actor."""

    outcome: IngressOutcome
    notice: str | None = None

    @property
    def cancelled(self) -> bool:
        """True when the host must suppress delivery of the message."""
        return self.outcome.is_rejection
