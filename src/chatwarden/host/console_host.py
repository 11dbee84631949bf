"""Interactive console host: type ``name: message`` to chat as ``name``."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Set

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import PromptSession

from chatwarden.datatypes.chat_datatypes import ActorID
from chatwarden.moderation.moderation_pipeline import ModerationPipeline
from chatwarden.util.logger import get_logger

logger = get_logger("console_host")

BOX_WIDTH = 60

CommandHandler = Callable[["ConsoleChatHost", list[str]], Awaitable[None]]


def console_print(message: str, style: str = "") -> None:
    """
    Print through prompt_toolkit so output does not break the active prompt.

    Args:
        message (str): The text to print.
        style (str): Optional prompt_toolkit style (e.g. ``"ansired"``).
    """
    formatted: FormattedText | str
    if style:
        formatted = FormattedText([(style, message)])
    else:
        formatted = message
    print_formatted_text(formatted)


def print_boxed_title(title: str, color: str = "") -> None:
    """Print ``title`` centred inside a ``BOX_WIDTH`` wide box."""
    inner_width = BOX_WIDTH - 2
    pad_left = (inner_width - len(title)) // 2
    pad_right = inner_width - len(title) - pad_left
    for line in (
        f"╔{'═' * inner_width}╗",
        f"║{' ' * pad_left}{title}{' ' * pad_right}║",
        f"╚{'═' * inner_width}╝",
    ):
        console_print(line, color)


@dataclass
class Command:
    """A console command with its handler and help text."""
    name: str
    handler: CommandHandler
    aliases: list[str]
    description: str
    usage: str = ""

    def matches(self, input_cmd: str) -> bool:
        return input_cmd == self.name or input_cmd in self.aliases


def parse_chat_line(line: str) -> tuple[str, str] | None:
    """Split ``"name: text"`` into ``(name, text)``; None when the line is not chat."""
    name, sep, text = line.partition(":")
    name = name.strip()
    if not sep or not name or any(ch.isspace() for ch in name):
        return None
    return name, text.strip()


class ConsoleChatHost:
    """
    ChatHost backed by the terminal.

    Every actor who has spoken is considered online until ``leave <name>``.
    Delivered messages are echoed; cancelled ones are not.
    """

    def __init__(self) -> None:
        self.pipeline: ModerationPipeline | None = None
        self.shutdown_event = asyncio.Event()
        self._online: Set[ActorID] = set()

    def attach(self, pipeline: ModerationPipeline) -> None:
        self.pipeline = pipeline

    # -------------------- ChatHost --------------------

    def send_message(self, actor_id: ActorID, text: str) -> None:
        console_print(f"  [to {actor_id}] {text}", "ansibrightred")

    def is_online(self, actor_id: ActorID) -> bool:
        return actor_id in self._online

    def retract_message(self, actor_id: ActorID, message: str) -> None:
        console_print(f"  [removed] <{actor_id}> {message}", "ansibrightblack")

    # -------------------- Input handling --------------------

    def handle_chat(self, name: str, text: str) -> None:
        if self.pipeline is None:
            console_print("Pipeline not attached.", "ansiyellow")
            return
        actor_id = ActorID(name)
        self._online.add(actor_id)
        decision = self.pipeline.handle_message(actor_id, name, text)
        if not decision.cancelled:
            console_print(f"<{name}> {text}")

    def mark_offline(self, name: str) -> bool:
        try:
            actor_id = ActorID(name)
        except ValueError:
            return False
        if actor_id not in self._online:
            return False
        self._online.discard(actor_id)
        return True

    async def handle_line(self, line: str) -> None:
        chat = parse_chat_line(line)
        if chat is not None:
            self.handle_chat(*chat)
            return

        parts = line.strip().split()
        if not parts:
            return
        cmd_name, args = parts[0].lower(), parts[1:]
        for cmd in COMMANDS:
            if cmd.matches(cmd_name):
                try:
                    await cmd.handler(self, args)
                except Exception as exc:
                    logger.exception("Error executing console command '%s': %s", cmd_name, exc)
                    console_print(f"Error executing command: {exc}", "ansibrightred")
                return
        console_print(f"Unknown command '{cmd_name}'. Type 'help' for available commands.", "ansibrightred")

    async def run(self) -> None:
        """Read lines until ``quit`` or EOF."""
        session: PromptSession[str] = PromptSession("> ")
        print_boxed_title("Chatwarden Console", "ansicyan")
        console_print("Type 'name: message' to chat, 'help' for commands.\n", "ansibrightblack")

        with patch_stdout():
            while not self.shutdown_event.is_set():
                try:
                    line = await session.prompt_async()
                except (EOFError, KeyboardInterrupt):
                    console_print("\nShutdown requested by user.", "ansibrightyellow")
                    self.shutdown_event.set()
                    break
                if line.strip():
                    await self.handle_line(line)


# ==================== Command Handlers ====================

async def cmd_help(host: ConsoleChatHost, args: list[str]) -> None:
    print_boxed_title("Console Commands Reference", "ansigreen")
    console_print("\n  name: message", "ansicyan")
    console_print("    Send a chat message as 'name'")
    for cmd in COMMANDS:
        aliases_str = f" (aliases: {', '.join(cmd.aliases)})" if cmd.aliases else ""
        console_print(f"\n  {cmd.name}{aliases_str}", "ansicyan")
        console_print(f"    {cmd.description}")
        if cmd.usage:
            console_print(f"    Usage: {cmd.usage}", "ansibrightblack")
    console_print("")


async def cmd_status(host: ConsoleChatHost, args: list[str]) -> None:
    print_boxed_title("Moderation Status", "ansimagenta")
    pipeline = host.pipeline
    if pipeline is None:
        console_print("  Pipeline:   🔴 Not attached")
        console_print("")
        return
    console_print(f"  Pipeline:   {'🟢 Running' if pipeline.is_running else '🔴 Stopped'}")
    console_print(f"  Pending:    {pipeline.pending_count}/{pipeline.batch_size}")
    console_print(f"  In flight:  {pipeline.in_flight_count}")
    console_print(f"  Muted:      {pipeline.mute_store.active_count()}")
    console_print("")


async def cmd_unmute(host: ConsoleChatHost, args: list[str]) -> None:
    if not args or host.pipeline is None:
        console_print("Usage: unmute <name>", "ansiyellow")
        return
    if host.pipeline.mute_store.unmute(ActorID(args[0])):
        console_print(f"{args[0]} unmuted.", "ansigreen")
    else:
        console_print(f"{args[0]} is not muted.", "ansiyellow")


async def cmd_leave(host: ConsoleChatHost, args: list[str]) -> None:
    if not args:
        console_print("Usage: leave <name>", "ansiyellow")
        return
    if host.mark_offline(args[0]):
        console_print(f"{args[0]} left the chat.", "ansibrightblack")
    else:
        console_print(f"{args[0]} is not online.", "ansiyellow")


async def cmd_quit(host: ConsoleChatHost, args: list[str]) -> None:
    console_print("Shutdown requested.", "ansiyellow")
    host.shutdown_event.set()


COMMANDS: list[Command] = [
    Command(name="help", handler=cmd_help, aliases=["h", "?"], description="Show this help message"),
    Command(
        name="status",
        handler=cmd_status,
        aliases=["stat", "info"],
        description="Show pending, in-flight and muted counts",
    ),
    Command(
        name="unmute",
        handler=cmd_unmute,
        aliases=[],
        description="Lift an actor's mute",
        usage="unmute <name>",
    ),
    Command(
        name="leave",
        handler=cmd_leave,
        aliases=["part"],
        description="Mark an actor as offline",
        usage="leave <name>",
    ),
    Command(
        name="quit",
        handler=cmd_quit,
        aliases=["exit", "shutdown", "stop"],
        description="Drain pending messages and shut down",
    ),
]
