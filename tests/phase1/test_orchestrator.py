"""Tests for SearchOrchestrator: fallbacks, state machine, and supersession."""

import asyncio

import httpx
import pytest

from flowsearch.models import SearchResult, Source
from flowsearch.search.service import (
    FALLBACK_TEXT,
    NETWORK_FALLBACK_TEXT,
    SearchOrchestrator,
    SearchState,
)
from flowsearch.transport.base import HttpStatusError, NetworkError
from flowsearch.transport.prediction import PredictionEndpointTransport

from tests.fixtures import ENDPOINT_URL, FakeTransport, mock_client


class TestSearchResults:
    async def test_returns_normalized_result(self):
        transport = FakeTransport({"q": {"text": "A", "sources": [{"title": "S"}]}})
        orchestrator = SearchOrchestrator(transport)

        result = await orchestrator.search("q")

        assert result == SearchResult(text="A", sources=[Source(title="S")])
        assert orchestrator.state is SearchState.COMPLETED
        assert orchestrator.error is None

    async def test_query_is_trimmed(self):
        transport = FakeTransport()
        orchestrator = SearchOrchestrator(transport)
        await orchestrator.search("  padded  ")
        assert transport.calls == ["padded"]
        assert orchestrator.last_query == "padded"

    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    async def test_blank_query_makes_no_call(self, query):
        transport = FakeTransport()
        orchestrator = SearchOrchestrator(transport)

        assert await orchestrator.search(query) is None
        assert transport.calls == []
        assert orchestrator.state is SearchState.IDLE


class TestFailures:
    async def test_http_500_returns_fallback(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="server error")

        async with mock_client(handler) as client:
            orchestrator = SearchOrchestrator(
                PredictionEndpointTransport(ENDPOINT_URL, client=client)
            )
            result = await orchestrator.search("anything")

        assert result.text == FALLBACK_TEXT
        assert result.sources == []
        assert orchestrator.state is SearchState.FAILED
        assert "500" in orchestrator.error
        assert "server error" in orchestrator.error
        assert orchestrator.is_busy is False

    async def test_network_error_has_its_own_message(self):
        orchestrator = SearchOrchestrator(FakeTransport(default=NetworkError("refused")))

        result = await orchestrator.search("q")

        assert result.text == NETWORK_FALLBACK_TEXT
        assert result.sources == []
        assert orchestrator.state is SearchState.FAILED
        assert "reach" in orchestrator.error

    async def test_unexpected_error_is_contained(self):
        orchestrator = SearchOrchestrator(FakeTransport(default=ValueError("weird")))

        result = await orchestrator.search("q")

        assert result.text == FALLBACK_TEXT
        assert orchestrator.error == "weird"

    async def test_custom_fallback_text(self):
        orchestrator = SearchOrchestrator(
            FakeTransport(default=HttpStatusError(502, "bad gateway")),
            fallback_text="Search failed: Please try again.",
        )
        result = await orchestrator.search("q")
        assert result.text == "Search failed: Please try again."

    async def test_error_cleared_by_next_search(self):
        transport = FakeTransport({"bad": HttpStatusError(500, "x")})
        orchestrator = SearchOrchestrator(transport)

        await orchestrator.search("bad")
        assert orchestrator.error is not None

        await orchestrator.search("good")
        assert orchestrator.error is None
        assert orchestrator.state is SearchState.COMPLETED


class TestStateMachine:
    async def test_busy_while_in_flight(self):
        transport = FakeTransport(blocking={"slow"})
        orchestrator = SearchOrchestrator(transport)

        task = asyncio.create_task(orchestrator.search("slow"))
        await asyncio.sleep(0)
        assert orchestrator.is_busy is True
        assert orchestrator.state is SearchState.IN_FLIGHT

        transport.release.set()
        result = await task

        assert result.text == "Fake answer"
        assert orchestrator.is_busy is False
        assert orchestrator.state is SearchState.COMPLETED

    async def test_new_search_supersedes_stale_one(self):
        transport = FakeTransport({"new": "fresh answer"}, blocking={"old"})
        orchestrator = SearchOrchestrator(transport)

        stale = asyncio.create_task(orchestrator.search("old"))
        await asyncio.sleep(0)

        fresh = await orchestrator.search("new")

        assert fresh.text == "fresh answer"
        assert await stale is None
        assert orchestrator.state is SearchState.COMPLETED
        assert orchestrator.last_query == "new"
        assert orchestrator.is_busy is False

    async def test_cancel_aborts_in_flight_request(self):
        transport = FakeTransport(blocking={"slow"})
        orchestrator = SearchOrchestrator(transport)

        task = asyncio.create_task(orchestrator.search("slow"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert orchestrator.cancel() is True
        assert await task is None
        assert transport.cancelled == ["slow"]
        assert orchestrator.is_busy is False

    async def test_cancel_when_idle(self):
        orchestrator = SearchOrchestrator(FakeTransport())
        assert orchestrator.cancel() is False

    async def test_caller_cancellation_propagates(self):
        transport = FakeTransport(blocking={"slow"})
        orchestrator = SearchOrchestrator(transport)

        task = asyncio.create_task(orchestrator.search("slow"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert orchestrator.state is SearchState.IDLE
        assert orchestrator.is_busy is False


class TestPerCallOutcome:
    async def test_outcomes(self):
        transport = FakeTransport({"bad": HttpStatusError(500, "x")})
        orchestrator = SearchOrchestrator(transport)

        assert await orchestrator.search_with_outcome("  ") == (None, SearchState.IDLE)

        result, outcome = await orchestrator.search_with_outcome("good")
        assert result.text == "Fake answer"
        assert outcome is SearchState.COMPLETED

        result, outcome = await orchestrator.search_with_outcome("bad")
        assert result.text == FALLBACK_TEXT
        assert outcome is SearchState.FAILED

    async def test_finished_stale_search_reports_its_own_outcome(self):
        transport = FakeTransport({"old": "old answer", "new": "new answer"})
        orchestrator = SearchOrchestrator(transport)

        stale = asyncio.create_task(orchestrator.search_with_outcome("old"))
        await asyncio.sleep(0)  # stale call awaits its transport task
        await asyncio.sleep(0)  # transport task finishes, stale call not yet resumed

        fresh = await orchestrator.search_with_outcome("new")
        stale_result, stale_outcome = await stale

        assert stale_result.text == "old answer"
        assert stale_outcome is SearchState.COMPLETED
        assert fresh[0].text == "new answer"
        assert fresh[1] is SearchState.COMPLETED
