"""Shared pytest fixtures for Flowsearch tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from flowsearch.conversations.router import get_chat_session
from flowsearch.conversations.session import ChatSession
from flowsearch.main import app
from flowsearch.proxy.router import get_upstream_transport
from flowsearch.search.service import SearchOrchestrator

from tests.fixtures import FakeTransport, RecordingHistory


@pytest.fixture
def transport():
    """Canned transport; tests tweak `responses` as needed."""
    return FakeTransport()


@pytest.fixture
def orchestrator(transport):
    return SearchOrchestrator(transport)


@pytest.fixture
def history():
    return RecordingHistory()


@pytest.fixture
def session(orchestrator, history):
    return ChatSession(orchestrator, history=history)


@pytest.fixture
async def client(transport, session):
    """Async test client with fake transport and session wired into the app."""
    app.dependency_overrides[get_upstream_transport] = lambda: transport
    app.dependency_overrides[get_chat_session] = lambda: session
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
