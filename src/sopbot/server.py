"""Process entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the lifespan context manager
- Warm the corpus cache once at startup
- Run the Slack Socket Mode handler until interrupted
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from functools import partial
from typing import TYPE_CHECKING

import structlog

from sopbot import __version__
from sopbot.cache import CorpusCache
from sopbot.completion import AnthropicCompletion, build_anthropic_client
from sopbot.config import Settings
from sopbot.corpus import build_corpus
from sopbot.extractor import BlockExtractor
from sopbot.notion import NotionClient, build_http_client
from sopbot.state import AppState
from sopbot.transport import build_slack_app, build_socket_mode_handler

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


async def warm_corpus(state: AppState) -> bool:
    """Load the corpus once so the first question does not pay for it.

    Returns True if non-empty content was loaded. Never raises.
    """
    try:
        content = await state.cache.get()
    except Exception as exc:
        log.warning("corpus_warm_failed", error=str(exc))
        return False

    if not content:
        log.warning(
            "corpus_warm_empty",
            message=(
                "No SOP content found. Make sure the "
                f"'{state.settings.assistant.integration_name}' integration "
                "has page access in Notion."
            ),
        )
        return False

    log.info("corpus_warm_loaded", content_length=len(content))
    return True


@asynccontextmanager
async def lifespan(settings: Settings) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the process lifetime."""
    http_client = build_http_client(settings.notion)
    store = NotionClient(http_client)
    extractor = BlockExtractor(store)
    cache = CorpusCache(
        partial(build_corpus, store, extractor),
        ttl=timedelta(minutes=settings.cache.ttl_minutes),
    )
    completion = AnthropicCompletion(
        build_anthropic_client(settings.anthropic),
        model=settings.anthropic.model,
        max_tokens=settings.anthropic.max_tokens,
    )

    state = AppState(
        settings=settings,
        cache=cache,
        completion=completion,
        store=store,
        http_client=http_client,
    )

    try:
        yield state
    finally:
        await completion.aclose()
        await http_client.aclose()
        log.info("server_stopping")


async def serve(settings: Settings) -> None:
    """Connect to Slack and handle events until the process is interrupted."""
    async with lifespan(settings) as state:
        app = build_slack_app(state)
        handler = build_socket_mode_handler(app, settings)

        await handler.connect_async()
        log.info(
            "server_started",
            version=__version__,
            model=settings.anthropic.model,
            cache_ttl_minutes=settings.cache.ttl_minutes,
        )
        await warm_corpus(state)

        try:
            await asyncio.Event().wait()
        finally:
            await handler.close_async()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__)

    missing = settings.missing_credentials()
    if missing:
        log.error("missing_credentials", settings=missing)
        sys.exit(1)

    with suppress(KeyboardInterrupt):
        asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
