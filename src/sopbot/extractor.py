"""Block-tree extraction and rendering.

A page is a tree of blocks whose children are only reachable through
paginated ``list_children`` calls. ``BlockExtractor.collect`` walks the tree
depth-first with an explicit stack, so a node is always followed by its whole
subtree before the next sibling, and stops fetching below ``max_depth``.

Rendering is a lookup from ``BlockKind`` to a small function; kinds without an
entry render to an empty line and are dropped.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from sopbot.models.notion import BlockKind
from sopbot.richtext import rich_text_to_plain

if TYPE_CHECKING:
    from sopbot.models.notion import ContentNode, PageRef
    from sopbot.protocols import ContentStoreProtocol

log = structlog.get_logger()

# Children of the page are depth 0; blocks at depth 3 are kept but their
# children are never fetched.
MAX_DEPTH = 3
PAGE_SIZE = 100

UNTITLED = "Untitled"
DIVIDER_LINE = "---"
CODE_FENCE = "```"


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


@dataclass
class _Frame:
    """Children listing in progress for one block."""

    block_id: str
    depth: int
    cursor: str | None = None
    exhausted: bool = False
    pending: deque[ContentNode] = field(default_factory=deque)


class BlockExtractor:
    """Flattens and renders the block tree below a page."""

    def __init__(
        self,
        store: ContentStoreProtocol,
        *,
        max_depth: int = MAX_DEPTH,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self._store = store
        self._max_depth = max_depth
        self._page_size = page_size

    async def collect(self, block_id: str) -> list[ContentNode]:
        """Return every block below ``block_id`` in document order.

        Store errors propagate; the caller decides how much to skip.
        """
        nodes: list[ContentNode] = []
        stack = [_Frame(block_id=block_id, depth=0)]

        while stack:
            frame = stack[-1]

            if not frame.pending:
                if frame.exhausted:
                    stack.pop()
                    continue
                listing = await self._store.list_children(
                    frame.block_id,
                    start_cursor=frame.cursor,
                    page_size=self._page_size,
                )
                frame.pending.extend(listing.results)
                frame.cursor = listing.next_cursor
                frame.exhausted = listing.next_cursor is None
                continue

            node = frame.pending.popleft()
            nodes.append(node)
            if node.has_children and frame.depth < self._max_depth:
                stack.append(_Frame(block_id=node.id, depth=frame.depth + 1))

        log.debug("blocks_collected", block_id=block_id, block_count=len(nodes))
        return nodes

    async def extract_text(self, block_id: str) -> str:
        """Collect the tree below ``block_id`` and render it to text."""
        return render_blocks(await self.collect(block_id))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_text(payload: Mapping[str, Any]) -> str:
    return rich_text_to_plain(payload.get("rich_text"))


def _render_code(payload: Mapping[str, Any]) -> str:
    return f"{CODE_FENCE}\n{rich_text_to_plain(payload.get('rich_text'))}\n{CODE_FENCE}"


def _render_to_do(payload: Mapping[str, Any]) -> str:
    checkbox = "[x]" if payload.get("checked") else "[ ]"
    return f"{checkbox} {rich_text_to_plain(payload.get('rich_text'))}"


def _render_divider(payload: Mapping[str, Any]) -> str:
    return DIVIDER_LINE


def _render_nothing(payload: Mapping[str, Any]) -> str:
    return ""


RENDERERS: dict[BlockKind, Callable[[Mapping[str, Any]], str]] = {
    BlockKind.PARAGRAPH: _render_text,
    BlockKind.HEADING_1: _render_text,
    BlockKind.HEADING_2: _render_text,
    BlockKind.HEADING_3: _render_text,
    BlockKind.BULLETED_LIST_ITEM: _render_text,
    BlockKind.NUMBERED_LIST_ITEM: _render_text,
    BlockKind.QUOTE: _render_text,
    BlockKind.CALLOUT: _render_text,
    BlockKind.TOGGLE: _render_text,
    BlockKind.CODE: _render_code,
    BlockKind.TO_DO: _render_to_do,
    BlockKind.DIVIDER: _render_divider,
}


def render_node(node: ContentNode) -> str:
    """Render a single block's own content (never its children)."""
    payload = node.payload
    if payload is None:
        return ""
    return RENDERERS.get(node.kind, _render_nothing)(payload)


def render_blocks(nodes: list[ContentNode]) -> str:
    """Render blocks one per line, dropping lines that are blank."""
    lines = (render_node(node) for node in nodes)
    return "\n".join(line for line in lines if line.strip())


# ---------------------------------------------------------------------------
# Page titles
# ---------------------------------------------------------------------------

TitleStrategy = Callable[[Mapping[str, Any]], str | None]


def _title_text(prop: object) -> str | None:
    if not isinstance(prop, Mapping):
        return None
    # All spans, not just the first: titles with mixed formatting split into several.
    text = rich_text_to_plain(prop.get("title"))
    return text or None


def _named_property(name: str) -> TitleStrategy:
    def strategy(properties: Mapping[str, Any]) -> str | None:
        return _title_text(properties.get(name))

    return strategy


def _first_title_typed(properties: Mapping[str, Any]) -> str | None:
    for prop in properties.values():
        if isinstance(prop, Mapping) and prop.get("type") == "title":
            text = _title_text(prop)
            if text:
                return text
    return None


# Tried in order. Database pages name their title column freely, so a
# fixed key is not enough.
TITLE_STRATEGIES: tuple[TitleStrategy, ...] = (
    _named_property("title"),
    _named_property("Name"),
    _first_title_typed,
)


def resolve_page_title(page: PageRef) -> str:
    """Return the page title, or ``"Untitled"`` when no strategy finds one."""
    for strategy in TITLE_STRATEGIES:
        title = strategy(page.properties)
        if title:
            return title
    return UNTITLED
