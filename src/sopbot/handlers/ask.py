"""Handler for one inbound question.

Receives AppState, reads the corpus through the cache, and delegates to the
orchestrator. No Slack imports: transport.py handles delivery and renders
errors raised from here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sopbot.answer import answer_question
from sopbot.errors import ErrorCode, SopBotError
from sopbot.models.answer import MAX_QUESTION_LENGTH, AskInput

if TYPE_CHECKING:
    from sopbot.models.answer import Answer
    from sopbot.state import AppState


async def handle(question: str, state: AppState) -> Answer:
    """Answer an already-cleaned question."""
    log = structlog.get_logger().bind(handler="ask", question_length=len(question))
    log.info("handler_called")

    # Validate input
    try:
        validated = AskInput(question=question)
    except ValueError as exc:
        log.info("invalid_question", detail=str(exc))
        raise SopBotError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Questions must be between 1 and {MAX_QUESTION_LENGTH} characters",
            suggestion="Ask a shorter, non-empty question.",
            recoverable=False,
        ) from exc

    corpus = await state.cache.get()
    answer = await answer_question(
        validated.question,
        corpus,
        state.completion,
        assistant_name=state.settings.assistant.name,
        organisation=state.settings.assistant.organisation,
    )
    log.info("handler_complete", outcome=answer.outcome, corpus_length=len(corpus))
    return answer
