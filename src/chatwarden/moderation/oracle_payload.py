"""
Build oracle requests from batches and parse the oracle's verdict text.

- The system instruction asks for exactly one ``ok``/``bad`` token per message,
  comma separated, in input order.
- The user message lists every entry on its own line with a 1-based index.
- The reply is split on commas and read positionally; a short reply leaves
  the tail non-violating.
"""

from __future__ import annotations

from typing import List, Sequence

from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from chatwarden.datatypes.chat_datatypes import VerdictSet
from chatwarden.util.logger import get_logger

logger = get_logger("oracle_payload")

OK_TOKEN = "ok"
BAD_TOKEN = "bad"
VERDICT_DELIMITER = ","

SYSTEM_PROMPT = (
    "You are a chat moderator. You will receive multiple numbered chat messages. "
    "Judge each message independently. Only answer '" + BAD_TOKEN + "' if the message is clearly "
    "toxic, abusive, or inappropriate; otherwise answer '" + OK_TOKEN + "'. Do not block harmless messages. "
    "Reply with exactly one answer per message, in the SAME ORDER as the messages, "
    "separated by commas, and nothing else."
)


def build_system_prompt(language: str | None = None) -> str:
    if language:
        return f"{SYSTEM_PROMPT} Language: {language}."
    return SYSTEM_PROMPT


def format_batch(messages: Sequence[str]) -> str:
    """Render messages as ``"1. text\\n2. text\\n"``."""
    return "".join(f"{index}. {text}\n" for index, text in enumerate(messages, start=1))


def build_messages(messages: Sequence[str], language: str | None = None) -> List[ChatCompletionMessageParam]:
    """Return the two-message chat payload for one batch."""
    return [
        ChatCompletionSystemMessageParam(role="system", content=build_system_prompt(language)),
        ChatCompletionUserMessageParam(role="user", content=format_batch(messages)),
    ]


def reply_token_budget(batch_length: int, tokens_per_verdict: int) -> int:
    """Cap on generated tokens, proportional to the batch so the reply cannot run away."""
    return max(1, batch_length * tokens_per_verdict)


def parse_verdicts(reply: str, batch_length: int) -> VerdictSet:
    """
    Map a comma separated verdict reply onto batch positions.

    Token ``i`` is violating when it contains ``bad`` (case-insensitive).
    Tokens beyond ``batch_length`` are ignored and positions beyond the
    reply are left out, which reads as non-violating.
    """
    tokens = reply.lower().split(VERDICT_DELIMITER) if reply.strip() else []
    verdicts = {
        index: BAD_TOKEN in token
        for index, token in enumerate(tokens[:batch_length])
    }
    if len(tokens) < batch_length:
        logger.warning(
            "[PARSE] Oracle returned %d verdicts for %d messages; tail treated as ok",
            len(tokens),
            batch_length,
        )
    return VerdictSet(verdicts)
