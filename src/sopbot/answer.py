"""Grounded question answering.

Pure orchestration: receives the corpus and a completion client, returns an
Answer. No knowledge of Slack, AppState, or how the corpus was obtained.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sopbot.errors import ErrorCode, SopBotError
from sopbot.models.answer import Answer, AnswerOutcome

if TYPE_CHECKING:
    from sopbot.protocols import CompletionProtocol

log = structlog.get_logger()

RESPONSE_RULES = (
    "Be concise but thorough",
    "Reference specific sections of the SOPs when relevant",
    "If the information isn't in the SOPs, say so clearly",
    "Format your responses for Slack (use *bold*, _italic_, and bullet points)",
    "If a question is unclear, ask for clarification",
    "Be friendly and professional",
)


def build_system_prompt(corpus: str, *, assistant_name: str, organisation: str) -> str:
    """Build the grounding instruction with the corpus embedded verbatim."""
    rules = "\n".join(f"{number}. {rule}" for number, rule in enumerate(RESPONSE_RULES, start=1))
    return (
        f"You are the {assistant_name}, a helpful AI assistant for {organisation}.\n"
        "Your role is to help team members find information in the company's "
        "Standard Operating Procedures (SOPs).\n"
        "\n"
        "When answering questions:\n"
        f"{rules}\n"
        "\n"
        "Here is the current SOP documentation:\n"
        "\n"
        f"{corpus}"
    )


async def answer_question(
    question: str,
    corpus: str,
    completion: CompletionProtocol,
    *,
    assistant_name: str,
    organisation: str,
) -> Answer:
    """Answer ``question`` from ``corpus``.

    An empty corpus short-circuits to ``NO_CONTENT`` without a model call.
    Otherwise the first text segment of the reply is returned untouched.
    """
    if not corpus:
        log.info("answer_skipped", reason="empty_corpus")
        return Answer(outcome=AnswerOutcome.NO_CONTENT)

    system = build_system_prompt(corpus, assistant_name=assistant_name, organisation=organisation)
    response = await completion.complete(system, question)

    if not response.segments:
        raise SopBotError(
            code=ErrorCode.COMPLETION_FAILED,
            message="The language model returned no text",
            suggestion="Try rephrasing the question.",
            recoverable=True,
        )

    return Answer(outcome=AnswerOutcome.ANSWERED, text=response.segments[0])
