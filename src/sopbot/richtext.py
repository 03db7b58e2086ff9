"""Rich-text reduction.

Notion stores inline text as arrays of styled spans. Only the ``plain_text``
of each span is kept; bold, italic, links and colours are dropped.
"""

from __future__ import annotations

from collections.abc import Mapping


def rich_text_to_plain(rich_text: object) -> str:
    """Concatenate the ``plain_text`` of every span in order.

    Anything that is not a list of spans reduces to an empty string, so a
    malformed block degrades to "no text" instead of failing the page.
    """
    if not isinstance(rich_text, list | tuple):
        return ""

    parts: list[str] = []
    for span in rich_text:
        if not isinstance(span, Mapping):
            continue
        text = span.get("plain_text")
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts)
