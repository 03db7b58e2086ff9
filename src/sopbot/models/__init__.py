from __future__ import annotations

from sopbot.models.answer import Answer, AnswerOutcome, AskInput, CompletionResponse
from sopbot.models.cache import CorpusCacheEntry
from sopbot.models.notion import (
    BlockChildren,
    BlockKind,
    ContentNode,
    PageRef,
    PageSearchResult,
)

__all__ = [
    # notion
    "BlockKind",
    "ContentNode",
    "BlockChildren",
    "PageRef",
    "PageSearchResult",
    # cache
    "CorpusCacheEntry",
    # answer
    "AskInput",
    "Answer",
    "AnswerOutcome",
    "CompletionResponse",
]
