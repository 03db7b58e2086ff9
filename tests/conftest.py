"""Shared test fixtures for the sopbot test suite."""

from __future__ import annotations

import pytest
from fakes import FakeClock, FakeCompletion, FakeContentStore


@pytest.fixture()
def store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture()
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
