"""Shared fixtures for unit and integration tests."""

from __future__ import annotations

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from tests.fakes import InMemoryContentStore, build_settings
from trivia.config import Settings


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def store() -> InMemoryContentStore:
  return InMemoryContentStore()


@pytest.fixture
def settings() -> Settings:
  return build_settings()


@pytest.fixture
def today() -> date:
  return date(2026, 3, 14)


@pytest.fixture
async def async_client(store: InMemoryContentStore, settings: Settings):
  from trivia.config import get_settings
  from trivia.main import app
  from trivia.storage.factory import get_content_store

  app.dependency_overrides[get_content_store] = lambda: store
  app.dependency_overrides[get_settings] = lambda: settings
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
