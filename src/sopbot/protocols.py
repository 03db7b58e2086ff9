"""Protocol interfaces for swappable components.

The extractor, aggregator and ask handler reference these protocols, not the
concrete clients. This allows:
- Tests to use lightweight in-memory fakes instead of Notion and Anthropic
- Another content store or model provider to be swapped in without touching
  the corpus pipeline
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sopbot.models.answer import CompletionResponse
    from sopbot.models.notion import BlockChildren, PageSearchResult


class ContentStoreProtocol(Protocol):
    """Interface for the page/block content store."""

    async def search_pages(self, start_cursor: str | None = None) -> PageSearchResult: ...

    async def list_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> BlockChildren: ...


class CompletionProtocol(Protocol):
    """Interface for the single-turn text completion service."""

    async def complete(self, system: str, user_message: str) -> CompletionResponse: ...
