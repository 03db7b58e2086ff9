from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class BlockKind(StrEnum):
    """Block types the extractor knows how to render."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    QUOTE = "quote"
    CALLOUT = "callout"
    CODE = "code"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    DIVIDER = "divider"
    OTHER = "other"


class ContentNode(BaseModel):
    """Single block from a page tree, as returned by the Notion API.

    The per-type payload lives under a key named after the block type
    (``{"type": "paragraph", "paragraph": {...}}``), so extra fields are kept.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    has_children: bool = False

    @property
    def kind(self) -> BlockKind:
        try:
            return BlockKind(self.type)
        except ValueError:
            return BlockKind.OTHER

    @property
    def payload(self) -> dict[str, Any] | None:
        value = (self.model_extra or {}).get(self.type)
        return value if isinstance(value, dict) else None


class BlockChildren(BaseModel):
    """One page of ``GET /blocks/{id}/children``."""

    results: list[ContentNode] = []
    next_cursor: str | None = None
    has_more: bool = False


class PageRef(BaseModel):
    """Top-level page reference returned by search."""

    id: str
    last_edited_time: datetime | None = None
    properties: dict[str, Any] = {}


class PageSearchResult(BaseModel):
    """One page of ``POST /search``."""

    results: list[PageRef] = []
    next_cursor: str | None = None
    has_more: bool = False
