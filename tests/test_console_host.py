"""Tests for console_host module."""

from unittest.mock import MagicMock, patch

import pytest

from chatwarden.datatypes.chat_datatypes import ActorID, IngressDecision, IngressOutcome
from chatwarden.host.chat_host import ChatHost
from chatwarden.host.console_host import ConsoleChatHost, parse_chat_line


@pytest.mark.parametrize(
    "line, expected",
    [
        ("steve: hello there", ("steve", "hello there")),
        ("steve:see http://example.com", ("steve", "see http://example.com")),
        ("  alex  :  spaced  ", ("alex", "spaced")),
        ("status", None),
        ("two words: nope", None),
        (": no name", None),
    ],
)
def test_parse_chat_line(line, expected) -> None:
    assert parse_chat_line(line) == expected


def test_console_host_satisfies_protocol() -> None:
    assert isinstance(ConsoleChatHost(), ChatHost)


@patch("chatwarden.host.console_host.console_print")
def test_delivered_message_is_echoed(mock_print) -> None:
    host = ConsoleChatHost()
    pipeline = MagicMock()
    pipeline.handle_message.return_value = IngressDecision(IngressOutcome.QUEUED)
    host.attach(pipeline)

    host.handle_chat("steve", "hello")

    pipeline.handle_message.assert_called_once_with(ActorID("steve"), "steve", "hello")
    mock_print.assert_called_once_with("<steve> hello")
    assert host.is_online(ActorID("steve")) is True


@patch("chatwarden.host.console_host.console_print")
def test_cancelled_message_is_not_echoed(mock_print) -> None:
    host = ConsoleChatHost()
    pipeline = MagicMock()
    pipeline.handle_message.return_value = IngressDecision(IngressOutcome.REJECTED_TOO_LONG, "too long")
    host.attach(pipeline)

    host.handle_chat("steve", "x" * 500)

    mock_print.assert_not_called()


@pytest.mark.asyncio
@patch("chatwarden.host.console_host.console_print")
async def test_leave_marks_actor_offline(mock_print) -> None:
    host = ConsoleChatHost()
    pipeline = MagicMock()
    pipeline.handle_message.return_value = IngressDecision(IngressOutcome.QUEUED)
    host.attach(pipeline)
    host.handle_chat("steve", "hi")

    await host.handle_line("leave steve")

    assert host.is_online(ActorID("steve")) is False


@pytest.mark.asyncio
@patch("chatwarden.host.console_host.console_print")
async def test_unmute_command_lifts_mute(mock_print) -> None:
    host = ConsoleChatHost()
    pipeline = MagicMock()
    pipeline.mute_store.unmute.return_value = True
    host.attach(pipeline)

    await host.handle_line("unmute steve")

    pipeline.mute_store.unmute.assert_called_once_with(ActorID("steve"))


@pytest.mark.asyncio
@patch("chatwarden.host.console_host.console_print")
async def test_quit_sets_shutdown_event(mock_print) -> None:
    host = ConsoleChatHost()

    await host.handle_line("exit")

    assert host.shutdown_event.is_set()


@pytest.mark.asyncio
@patch("chatwarden.host.console_host.console_print")
async def test_unknown_command_reports_error(mock_print) -> None:
    host = ConsoleChatHost()

    await host.handle_line("frobnicate")

    assert "Unknown command" in mock_print.call_args.args[0]


@pytest.mark.asyncio
@patch("chatwarden.host.console_host.print_boxed_title")
@patch("chatwarden.host.console_host.console_print")
async def test_status_reports_pipeline_counts(mock_print, mock_title) -> None:
    host = ConsoleChatHost()
    pipeline = MagicMock()
    pipeline.is_running = True
    pipeline.pending_count = 2
    pipeline.batch_size = 5
    pipeline.in_flight_count = 1
    pipeline.mute_store.active_count.return_value = 3
    host.attach(pipeline)

    await host.handle_line("status")

    printed = "\n".join(call.args[0] for call in mock_print.call_args_list)
    assert "2/5" in printed
    assert "Muted:      3" in printed
