"""
tests/conftest.py — Fake MongoDB client factory and environment fixtures.

No test in this suite opens a real network connection: every
ConnectionManager is built with a ``FakeMongo`` factory that counts client
constructions and pings.
"""

from __future__ import annotations

import asyncio

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from core import database
from core.config import get_settings


class FakeCollection:
    def __init__(self, count: int) -> None:
        self._count = count

    async def estimated_document_count(self) -> int:
        return self._count


class FakeDatabase:
    def __init__(self, client: "FakeClient", name: str) -> None:
        self.client = client
        self.name = name

    def __getitem__(self, name: str) -> FakeCollection:
        return FakeCollection(self.client.factory.counts.get(name, 0))

    async def command(self, cmd: str) -> dict:
        factory = self.client.factory
        factory.pings += 1
        if factory.delay:
            await asyncio.sleep(factory.delay)
        if factory.fail:
            raise ServerSelectionTimeoutError("no servers reachable")
        return {"ok": 1.0}


class FakeClient:
    def __init__(self, factory: "FakeMongo", uri: str, kwargs: dict) -> None:
        self.factory = factory
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False
        self.admin = FakeDatabase(self, "admin")

    def __getitem__(self, name: str) -> FakeDatabase:
        return FakeDatabase(self, name)

    async def close(self) -> None:
        self.closed = True


class FakeMongo:
    """Client factory standing in for ``AsyncMongoClient``."""

    def __init__(self, fail: bool = False, delay: float = 0.0) -> None:
        self.fail = fail
        self.delay = delay
        self.pings = 0
        self.created: list[FakeClient] = []
        self.counts: dict[str, int] = {}

    def __call__(self, uri: str, **kwargs) -> FakeClient:
        client = FakeClient(self, uri, kwargs)
        self.created.append(client)
        return client


@pytest.fixture
def fake_mongo() -> FakeMongo:
    return FakeMongo()


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Isolate every test from the real environment and the default manager."""
    monkeypatch.delenv("MONGODB_URI", raising=False)
    monkeypatch.delenv("MONGODB_TIMEOUT_MS", raising=False)
    monkeypatch.setattr("core.config.load_dotenv", lambda *a, **kw: False)
    get_settings.cache_clear()
    database.set_manager(None)
    yield
    database.set_manager(None)
    get_settings.cache_clear()
