from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

MAX_QUESTION_LENGTH = 4000


class AskInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(min_length=1, max_length=MAX_QUESTION_LENGTH)


class AnswerOutcome(StrEnum):
    ANSWERED = "answered"
    NO_CONTENT = "no_content"


class Answer(BaseModel):
    """Result of answering one question."""

    outcome: AnswerOutcome
    text: str = ""  # Model reply verbatim; empty for NO_CONTENT


class CompletionResponse(BaseModel):
    """Text returned by the completion service for a single-turn request."""

    segments: list[str]  # Text blocks in response order
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
