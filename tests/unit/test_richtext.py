"""Unit tests for sopbot.richtext."""

from __future__ import annotations

import pytest

from sopbot.richtext import rich_text_to_plain


class TestRichTextToPlain:
    def test_concatenates_spans_in_order(self) -> None:
        assert rich_text_to_plain([{"plain_text": "A"}, {"plain_text": "B"}]) == "AB"

    @pytest.mark.parametrize("value", [None, "text", 42, {"plain_text": "A"}])
    def test_non_sequence_input_returns_empty(self, value: object) -> None:
        assert rich_text_to_plain(value) == ""

    def test_empty_list_returns_empty(self) -> None:
        assert rich_text_to_plain([]) == ""

    def test_styling_is_discarded(self) -> None:
        spans = [
            {
                "type": "text",
                "plain_text": "Bold",
                "annotations": {"bold": True},
                "href": None,
            },
            {
                "type": "text",
                "plain_text": " link",
                "annotations": {"bold": False},
                "href": "https://example.com",
            },
        ]
        assert rich_text_to_plain(spans) == "Bold link"

    def test_malformed_spans_contribute_nothing(self) -> None:
        spans = [{"plain_text": "keep"}, "junk", {"type": "mention"}, {"plain_text": None}]
        assert rich_text_to_plain(spans) == "keep"
