"""Notion REST client.

All content-store I/O goes through a single NotionClient shared across
questions. The client receives an httpx.AsyncClient via constructor
injection; the lifespan owns the client lifecycle. No retries are attempted
here: one failed request is one failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import ValidationError

from sopbot.errors import ErrorCode, SopBotError
from sopbot.models.notion import BlockChildren, PageSearchResult

if TYPE_CHECKING:
    from sopbot.config import NotionSettings

log = structlog.get_logger()

MAX_PAGE_SIZE = 100

SEARCH_PAGES_FILTER = {"property": "object", "value": "page"}
SEARCH_SORT = {"direction": "descending", "timestamp": "last_edited_time"}


def build_http_client(settings: NotionSettings) -> httpx.AsyncClient:
    """Create the shared Notion httpx client. Called once at startup."""
    return httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={
            "Authorization": f"Bearer {settings.api_key}",
            "Notion-Version": settings.version,
            "User-Agent": "sopbot/1.0",
        },
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def _error_message(response: httpx.Response) -> str:
    """Pull Notion's human-readable ``message`` out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return f"HTTP {response.status_code}: {body['message']}"
    return f"HTTP {response.status_code}"


def _raise_for_status(response: httpx.Response, what: str) -> None:
    if response.is_success:
        return

    detail = _error_message(response)
    status = response.status_code
    if status in (401, 403):
        raise SopBotError(
            code=ErrorCode.NOTION_UNAUTHORIZED,
            message=f"Notion rejected the request for {what} ({detail})",
            suggestion="Check the Notion API key and that the integration is shared with the pages.",
            recoverable=False,
        )
    if status == 404:
        raise SopBotError(
            code=ErrorCode.NOTION_NOT_FOUND,
            message=f"Notion could not find {what} ({detail})",
            suggestion="Share the page with the integration or check the ID.",
            recoverable=False,
        )
    if status == 429:
        raise SopBotError(
            code=ErrorCode.NOTION_RATE_LIMITED,
            message=f"Notion rate limit hit while fetching {what}",
            suggestion="Wait a moment and ask again.",
            recoverable=True,
        )
    raise SopBotError(
        code=ErrorCode.NOTION_REQUEST_FAILED,
        message=f"Notion request for {what} failed ({detail})",
        suggestion="Notion may be temporarily unavailable.",
        recoverable=True,
    )


class NotionClient:
    """Notion API client implementing ContentStoreProtocol."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _send(self, method: str, path: str, what: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise SopBotError(
                code=ErrorCode.NOTION_REQUEST_FAILED,
                message=f"Network error fetching {what}: {exc}",
                suggestion="Notion may be temporarily unavailable.",
                recoverable=True,
            ) from exc

        _raise_for_status(response, what)
        try:
            return response.json()
        except ValueError as exc:
            raise SopBotError(
                code=ErrorCode.NOTION_REQUEST_FAILED,
                message=f"Notion returned a non-JSON body for {what}",
                suggestion="Notion may be temporarily unavailable.",
                recoverable=True,
            ) from exc

    async def search_pages(self, start_cursor: str | None = None) -> PageSearchResult:
        """Return one page of pages visible to the integration, newest edit first."""
        body: dict[str, Any] = {
            "filter": SEARCH_PAGES_FILTER,
            "sort": SEARCH_SORT,
            "page_size": MAX_PAGE_SIZE,
        }
        if start_cursor is not None:
            body["start_cursor"] = start_cursor

        data = await self._send("POST", "/search", "page search", json=body)
        try:
            result = PageSearchResult.model_validate(data)
        except ValidationError as exc:
            raise SopBotError(
                code=ErrorCode.NOTION_REQUEST_FAILED,
                message="Unexpected response shape from Notion search",
                suggestion="The Notion API version may not be supported.",
                recoverable=False,
            ) from exc

        log.debug("notion_search_page", result_count=len(result.results), has_more=result.has_more)
        return result

    async def list_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> BlockChildren:
        """Return one page of the direct children of ``block_id``."""
        params: dict[str, Any] = {"page_size": min(page_size, MAX_PAGE_SIZE)}
        if start_cursor is not None:
            params["start_cursor"] = start_cursor

        what = f"block {block_id}"
        data = await self._send("GET", f"/blocks/{block_id}/children", what, params=params)
        try:
            return BlockChildren.model_validate(data)
        except ValidationError as exc:
            raise SopBotError(
                code=ErrorCode.NOTION_REQUEST_FAILED,
                message=f"Unexpected response shape listing children of {what}",
                suggestion="The Notion API version may not be supported.",
                recoverable=False,
            ) from exc
