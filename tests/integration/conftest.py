"""Integration test fixtures.

Provides a fully wired AppState: real NotionClient over an httpx client
(routes mocked with respx by each test), real extractor, aggregator and
corpus cache, and a fake completion service.
"""

from __future__ import annotations

from functools import partial

import httpx
import pytest
from fakes import FakeClock, FakeCompletion

from sopbot.cache import CorpusCache
from sopbot.config import NotionSettings, Settings
from sopbot.corpus import build_corpus
from sopbot.extractor import BlockExtractor
from sopbot.notion import NotionClient, build_http_client
from sopbot.state import AppState


@pytest.fixture()
async def http_client() -> httpx.AsyncClient:
    async with build_http_client(NotionSettings(api_key="secret_test")) as client:
        yield client


@pytest.fixture()
def app_state(
    http_client: httpx.AsyncClient, completion: FakeCompletion, clock: FakeClock
) -> AppState:
    store = NotionClient(http_client)
    extractor = BlockExtractor(store)
    return AppState(
        settings=Settings(
            assistant={
                "name": "Arabnb SOP Assistant",
                "organisation": "Arabnb",
                "integration_name": "Arabnb SOP Bot",
            }
        ),
        cache=CorpusCache(partial(build_corpus, store, extractor), clock=clock),
        completion=completion,
        store=store,
        http_client=http_client,
    )
