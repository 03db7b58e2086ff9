"""End-to-end question flow: Notion HTTP → corpus → prompt → Slack reply text."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import httpx
import respx

from sopbot.transport import reply_for

if TYPE_CHECKING:
    from fakes import FakeClock, FakeCompletion

    from sopbot.state import AppState

BASE_URL = "https://api.notion.com/v1"


def _page(page_id: str, title: str, edited: str) -> dict:
    return {
        "object": "page",
        "id": page_id,
        "last_edited_time": edited,
        "properties": {"title": {"id": "title", "type": "title", "title": [{"plain_text": title}]}},
    }


def _block(block_id: str, block_type: str, text: str, *, has_children: bool = False) -> dict:
    return {
        "object": "block",
        "id": block_id,
        "type": block_type,
        "has_children": has_children,
        block_type: {"rich_text": [{"type": "text", "plain_text": text}]},
    }


def _listing(*blocks: dict, next_cursor: str | None = None) -> httpx.Response:
    return httpx.Response(
        200,
        json={"results": list(blocks), "next_cursor": next_cursor, "has_more": next_cursor is not None},
    )


def _mock_workspace() -> None:
    respx.post(f"{BASE_URL}/search").mock(
        return_value=httpx.Response(
            200,
            json={
                "results": [
                    _page("checkin", "Check-in", "2025-05-02T09:00:00.000Z"),
                    _page("broken", "Broken", "2025-05-01T09:00:00.000Z"),
                    _page("pool", "Pool", "2025-04-01T09:00:00.000Z"),
                ],
                "next_cursor": None,
            },
        )
    )
    respx.get(f"{BASE_URL}/blocks/checkin/children").mock(
        return_value=_listing(
            _block("h", "heading_2", "Arrival"),
            _block("steps", "toggle", "Steps", has_children=True),
        )
    )
    respx.get(f"{BASE_URL}/blocks/steps/children").mock(
        return_value=_listing(_block("s1", "numbered_list_item", "Check-in is at 3pm"))
    )
    respx.get(f"{BASE_URL}/blocks/broken/children").mock(
        return_value=httpx.Response(404, json={"object": "error", "message": "Could not find block"})
    )
    respx.get(f"{BASE_URL}/blocks/pool/children").mock(
        return_value=_listing(_block("p1", "paragraph", "No glass by the pool"))
    )


class TestQuestionFlow:
    async def test_answer_grounded_in_workspace(
        self, app_state: AppState, completion: FakeCompletion
    ) -> None:
        with respx.mock:
            _mock_workspace()
            text = await reply_for("When is check-in?", app_state)

        assert text == "Check-in is at 3pm."
        system, question = completion.calls[0]
        assert question == "When is check-in?"
        assert system.endswith(
            "\n## Check-in\n\nArrival\nSteps\nCheck-in is at 3pm"
            "\n\n---\n"
            "\n## Pool\n\nNo glass by the pool"
        )
        assert "Broken" not in system

    async def test_cached_corpus_skips_notion(self, app_state: AppState) -> None:
        with respx.mock:
            _mock_workspace()
            await reply_for("When is check-in?", app_state)
            await reply_for("Pool rules?", app_state)
            request_count = respx.calls.call_count

        # one search + four children listings, all from the first question
        assert request_count == 5

    async def test_empty_workspace(self, app_state: AppState, completion: FakeCompletion) -> None:
        with respx.mock:
            respx.post(f"{BASE_URL}/search").mock(
                return_value=httpx.Response(200, json={"results": [], "next_cursor": None})
            )
            text = await reply_for("When is check-in?", app_state)

        assert "'Arabnb SOP Bot' integration" in text
        assert completion.calls == []

    async def test_notion_down_without_cache(self, app_state: AppState) -> None:
        with respx.mock:
            respx.post(f"{BASE_URL}/search").mock(side_effect=httpx.ConnectError("unreachable"))
            text = await reply_for("When is check-in?", app_state)

        assert text.startswith("Sorry, I encountered an error: Network error fetching page search")

    async def test_notion_down_with_cache_serves_stale(
        self, app_state: AppState, clock: FakeClock
    ) -> None:
        with respx.mock:
            _mock_workspace()
            await reply_for("When is check-in?", app_state)

        clock.advance(timedelta(minutes=6))
        with respx.mock:
            respx.post(f"{BASE_URL}/search").mock(return_value=httpx.Response(503))
            text = await reply_for("When is check-in?", app_state)

        assert text == "Check-in is at 3pm."
