"""
Request/response adapter for the external moderation oracle.

The oracle is any OpenAI-compatible chat completions endpoint. One call
classifies a whole batch. Every failure (non-success status, transport
error, timeout, malformed body) fails open: the caller receives an empty
VerdictSet and nobody is muted for that batch. The client never retries.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from openai import AsyncOpenAI, OpenAIError

from chatwarden.configuration.ai_settings import AISettings
from chatwarden.datatypes.chat_datatypes import VerdictSet
from chatwarden.moderation import oracle_payload
from chatwarden.util.logger import get_logger

logger = get_logger("oracle_client")


class ModerationOracleClient:
    """
    Classify batches of chat messages through an OpenAI-compatible API.

    Args:
        api_key: Bearer token for the API.
        model_name: Model identifier sent with each request.
        base_url: API root; requests go to ``{base_url}/chat/completions``.
        timeout_seconds: Upper bound on one oracle call.
        tokens_per_verdict: Reply token budget per message in the batch.
        language: Optional language hint appended to the instructions.
        client: Pre-built AsyncOpenAI client (tests inject a mock here).
    """

    def __init__(
        self,
        api_key: str | None,
        model_name: str,
        *,
        base_url: str | None = None,
        timeout_seconds: float = 10.0,
        tokens_per_verdict: int = 2,
        language: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model_name = model_name
        self._timeout_seconds = timeout_seconds
        self._tokens_per_verdict = tokens_per_verdict
        self._language = language
        if client is None:
            if not api_key:
                logger.error("[ORACLE] API key is missing; every oracle call will fail open.")
            client = AsyncOpenAI(
                api_key=api_key or "missing-api-key",
                base_url=base_url,
                timeout=timeout_seconds,
                max_retries=0,
            )
        self._client = client
        logger.info("[ORACLE] Initialized with base_url=%s, model=%s", base_url, model_name)

    @classmethod
    def from_settings(cls, settings: AISettings) -> "ModerationOracleClient":
        return cls(
            settings.api_key,
            settings.model_name,
            base_url=settings.base_url,
            timeout_seconds=settings.request_timeout_seconds,
            tokens_per_verdict=settings.tokens_per_verdict,
            language=settings.language,
        )

    async def classify(self, messages: Sequence[str]) -> VerdictSet:
        """
        Judge every message of one batch in a single oracle call.

        Args:
            messages: Message texts in batch order.

        Returns:
            VerdictSet keyed by batch position; empty on any failure.
        """
        if not messages:
            return VerdictSet.empty()

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=oracle_payload.build_messages(messages, self._language),
                    max_tokens=oracle_payload.reply_token_budget(len(messages), self._tokens_per_verdict),
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "[ORACLE] Request timed out after %.1fs; %d messages pass unmoderated",
                self._timeout_seconds,
                len(messages),
            )
            return VerdictSet.empty()
        except OpenAIError as exc:
            logger.warning("[ORACLE] Request failed (%s); %d messages pass unmoderated", exc, len(messages))
            return VerdictSet.empty()
        except ValueError as exc:
            logger.error("[ORACLE] Response body could not be decoded: %s", exc)
            return VerdictSet.empty()

        try:
            reply = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            logger.error("[ORACLE] Malformed response body: %s", exc)
            return VerdictSet.empty()
        if not isinstance(reply, str):
            logger.error("[ORACLE] Response carried no text content")
            return VerdictSet.empty()

        verdicts = oracle_payload.parse_verdicts(reply, len(messages))
        logger.debug("[ORACLE] Reply %r -> violating positions %s", reply, verdicts.violating_positions())
        return verdicts

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        try:
            await self._client.close()
        except Exception as exc:
            logger.warning("[ORACLE] Error while closing client: %s", exc)
