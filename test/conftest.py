import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_extractor, get_task_store
from api.main import app
from extraction.task_extractor import TranscriptExtractor
from llm.llm_client import LLMClient
from storage.task_store import InMemoryTaskStore


class FakeProvider:
    name = "fake"

    def __init__(self, response_text: str):
        self._response_text = response_text
        self.prompts = []

    def generate(self, *, system: str, user: str) -> str:
        self.prompts.append(user)
        return self._response_text


class UnreachableProvider:
    name = "unreachable"

    def generate(self, *, system: str, user: str) -> str:
        raise httpx.ConnectError("fetch failed")


def make_task(**overrides) -> dict:
    payload = {
        "title": "Prepare quarterly report",
        "description": "Collect the numbers and write the summary",
        "priority": "High",
        "dueDate": "31-12-2099",
    }
    payload.update(overrides)
    return payload


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def store():
    return InMemoryTaskStore()


@pytest.fixture
def use_provider():
    """Route the API's transcript extraction through the given provider."""
    def _use(provider):
        app.dependency_overrides[get_extractor] = lambda: TranscriptExtractor(
            llm_client=LLMClient(provider=provider)
        )
    return _use


@pytest.fixture
def client(store, use_provider):
    app.dependency_overrides[get_task_store] = lambda: store
    use_provider(UnreachableProvider())
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_fields(i: int, **overrides) -> dict:
    """Already-validated store fields for seeding a store directly."""
    fields = {
        "title": f"Task number {i:02d} title",
        "description": f"Description for task number {i:02d}",
        "status": "To Do",
        "priority": "Medium",
        "dueDate": "31-12-2099",
    }
    fields.update(overrides)
    return fields


def seed(store, rows):
    async def _seed():
        return [await store.insert(fields) for fields in rows]
    return run(_seed())
