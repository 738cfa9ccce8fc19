"""Shared test helpers."""

import asyncio
import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from flowsearch.conversations.history import SearchHistoryRecorder
from flowsearch.models import Conversation, SearchResult, Source
from flowsearch.transport.base import SearchTransport

ENDPOINT_URL = "https://flowise.test/api/v1/prediction/test-flow"


def make_source(title: str = "Bulletin", **overrides: Any) -> Source:
    return Source(title=title, **overrides)


def make_result(text: str = "An answer", sources: list[Source] | None = None) -> SearchResult:
    return SearchResult(text=text, sources=sources or [])


def with_timestamp(conversation: Conversation, timestamp: datetime) -> Conversation:
    """Backdate a conversation (e.g. for day grouping)."""
    return conversation.model_copy(update={"timestamp": timestamp})


def mock_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by `handler`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_handler(payload: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)
    return handler


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


class FakeTransport(SearchTransport):
    """Transport that returns canned payloads or raises canned errors.

    `responses` maps a query to a payload or an exception instance; queries
    in `blocking` wait until `release` is set.
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        *,
        default: Any = "Fake answer",
        blocking: set[str] | None = None,
    ) -> None:
        self.responses = responses or {}
        self.default = default
        self.blocking = blocking or set()
        self.release = asyncio.Event()
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    async def fetch_answer(self, query: str) -> Any:
        self.calls.append(query)
        if query in self.blocking:
            try:
                await self.release.wait()
            except asyncio.CancelledError:
                self.cancelled.append(query)
                raise
        response = self.responses.get(query, self.default)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingHistory(SearchHistoryRecorder):
    def __init__(self, *, fail: bool = False) -> None:
        self.saved: list[tuple[str, str, list[Source]]] = []
        self.fail = fail

    async def save_search_history(
        self, query: str, answer_text: str, sources: list[Source]
    ) -> None:
        if self.fail:
            raise RuntimeError("history backend unavailable")
        self.saved.append((query, answer_text, sources))
