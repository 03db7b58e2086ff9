"""Corpus aggregation.

Builds the single text document used as model context: every page the
integration can see, newest edit first, each rendered as a ``## title``
section. One broken page never fails the whole build.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from sopbot.extractor import resolve_page_title

if TYPE_CHECKING:
    from sopbot.extractor import BlockExtractor
    from sopbot.models.notion import PageRef
    from sopbot.protocols import ContentStoreProtocol

log = structlog.get_logger()

PAGE_SEPARATOR = "\n\n---\n"

_OLDEST = datetime.min.replace(tzinfo=UTC)


async def list_pages(store: ContentStoreProtocol) -> list[PageRef]:
    """Return all accessible pages, most recently edited first.

    Follows the search cursor until exhausted. The store is asked for this
    order already; the stable local sort keeps it even if it is not honoured.
    """
    pages: list[PageRef] = []
    cursor: str | None = None
    while True:
        result = await store.search_pages(start_cursor=cursor)
        pages.extend(result.results)
        cursor = result.next_cursor
        if cursor is None:
            break

    return sorted(pages, key=lambda page: page.last_edited_time or _OLDEST, reverse=True)


def format_page(title: str, body: str) -> str:
    return f"\n## {title}\n\n{body}"


async def build_corpus(store: ContentStoreProtocol, extractor: BlockExtractor) -> str:
    """Aggregate every page into one corpus string.

    Returns an empty string when no page has renderable text. Errors from
    page enumeration propagate; errors from a single page are logged and
    that page is skipped.
    """
    pages = await list_pages(store)

    sections: list[str] = []
    failed = 0
    for page in pages:
        try:
            title = resolve_page_title(page)
            body = await extractor.extract_text(page.id)
        except Exception as exc:
            failed += 1
            log.warning("page_extraction_failed", page_id=page.id, error=str(exc))
            continue

        if body.strip():
            sections.append(format_page(title, body))

    corpus = PAGE_SEPARATOR.join(sections)
    log.info(
        "corpus_built",
        pages_found=len(pages),
        pages_included=len(sections),
        pages_failed=failed,
        content_length=len(corpus),
    )
    return corpus
