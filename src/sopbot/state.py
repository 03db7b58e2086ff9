"""Application state container.

AppState is created once at startup (inside ``server.lifespan``) and passed
by reference to every Slack handler. Tests build their own instances with
fake collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from sopbot.cache import CorpusCache
    from sopbot.config import Settings
    from sopbot.protocols import CompletionProtocol, ContentStoreProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every handler."""

    settings: Settings
    cache: CorpusCache
    completion: CompletionProtocol
    store: ContentStoreProtocol | None = None
    http_client: httpx.AsyncClient | None = None
