"""In-memory corpus cache with serve-stale-on-error.

Holds a single ``CorpusCacheEntry`` for the whole process. A fresh entry is
served without touching the network; a stale or missing one triggers a
rebuild that every reader arriving meanwhile shares. When a rebuild fails and
an earlier non-empty corpus exists, that corpus is served unchanged and its
``fetched_at`` is left alone so the next read tries again. With nothing to
fall back on, the error propagates to the caller.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from sopbot.models.cache import CorpusCacheEntry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = structlog.get_logger()

DEFAULT_TTL = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(UTC)


class CorpusCache:
    """TTL cache around a corpus aggregation coroutine."""

    def __init__(
        self,
        aggregate: Callable[[], Awaitable[str]],
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._aggregate = aggregate
        self._ttl = ttl
        self._clock = clock
        self._entry: CorpusCacheEntry | None = None
        self._inflight: asyncio.Task[str] | None = None

    @property
    def entry(self) -> CorpusCacheEntry | None:
        return self._entry

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _fresh_content(self) -> str | None:
        entry = self._entry
        if entry is not None and entry.is_fresh(self._clock()):
            return entry.content
        return None

    async def get(self) -> str:
        """Return the current corpus, rebuilding it if the entry is not fresh.

        Readers that arrive while a rebuild is running wait on that rebuild
        and receive its outcome, including its error. The first read after it
        settles starts a new one.
        """
        content = self._fresh_content()
        if content is not None:
            log.debug("corpus_cache_hit", content_length=len(content))
            return content

        task = self._inflight
        if task is None:
            task = asyncio.create_task(self._refresh())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        else:
            log.debug("corpus_refresh_joined")
        # A cancelled reader must not cancel the rebuild other readers share.
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task[str]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _refresh(self) -> str:
        previous = self._entry
        log.info("corpus_refresh_started", cached=previous is not None)
        started_at = self._clock()

        try:
            content = await self._aggregate()
        except Exception as exc:
            if previous is not None and previous.content:
                log.warning(
                    "corpus_serving_stale",
                    error=str(exc),
                    fetched_at=previous.fetched_at.isoformat(),
                )
                return previous.content
            log.warning("corpus_refresh_failed", error=str(exc))
            raise

        self._entry = CorpusCacheEntry(content=content, fetched_at=started_at, ttl=self._ttl)
        log.info("corpus_refresh_complete", content_length=len(content))
        return content
