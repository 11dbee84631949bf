"""Interface the moderation pipeline expects from the chat host it is embedded in."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chatwarden.datatypes.chat_datatypes import ActorID


@runtime_checkable
class ChatHost(Protocol):
    """
    Outbound side of the host (game server, chat bridge, console).

    The inbound side is just a call to ``ModerationPipeline.handle_message``;
    the host cancels delivery when the returned decision says so.
    """

    def send_message(self, actor_id: ActorID, text: str) -> None:
        """Tell an actor something. Fire and forget."""
        ...

    def is_online(self, actor_id: ActorID) -> bool:
        """Whether the actor is still connected and can receive notices."""
        ...

    def retract_message(self, actor_id: ActorID, message: str) -> None:
        """Remove an already delivered message, where the host supports it."""
        ...
