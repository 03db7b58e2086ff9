"""Anthropic completion client.

One request per question: a system prompt and a single user message, no
history, no streaming, no tools. SDK errors are translated to SopBotError so
the transport can render them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import anthropic
import structlog

from sopbot.errors import ErrorCode, SopBotError
from sopbot.models.answer import CompletionResponse

if TYPE_CHECKING:
    from sopbot.config import AnthropicSettings

log = structlog.get_logger()


def build_anthropic_client(settings: AnthropicSettings) -> anthropic.AsyncAnthropic:
    """Create the shared Anthropic client. Called once at startup."""
    # None lets the SDK read ANTHROPIC_API_KEY itself
    return anthropic.AsyncAnthropic(api_key=settings.api_key or None)


class AnthropicCompletion:
    """Messages API client implementing CompletionProtocol."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        *,
        model: str,
        max_tokens: int,
    ) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens

    async def complete(self, system: str, user_message: str) -> CompletionResponse:
        try:
            message = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=system,
                messages=[{"role": "user", "content": user_message}],
            )
        except anthropic.APIError as exc:
            raise SopBotError(
                code=ErrorCode.COMPLETION_FAILED,
                message=f"The language model request failed: {exc.message}",
                suggestion="Try asking again in a moment.",
                recoverable=True,
            ) from exc

        segments = [
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ]
        usage = getattr(message, "usage", None)
        response = CompletionResponse(
            segments=segments,
            model=getattr(message, "model", "") or self._model,
            input_tokens=getattr(usage, "input_tokens", 0) if usage else 0,
            output_tokens=getattr(usage, "output_tokens", 0) if usage else 0,
        )
        log.info(
            "completion_complete",
            model=response.model,
            segment_count=len(segments),
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )
        return response

    async def aclose(self) -> None:
        await self._client.close()
