"""Search orchestrator: one async entry point that always resolves to a result."""

import asyncio
import logging
from enum import Enum

from flowsearch.models import SearchResult
from flowsearch.normalize import normalize
from flowsearch.transport.base import HttpStatusError, NetworkError, SearchTransport

logger = logging.getLogger(__name__)

FALLBACK_TEXT = (
    "I apologize, but I'm currently unable to process your request due to a"
    " technical issue. Please try again in a moment."
)
NETWORK_FALLBACK_TEXT = (
    "I couldn't reach the search service. Please check your connection and try again."
)


class SearchState(Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"


class SearchOrchestrator:
    """Runs searches against a transport and converts failures into fallbacks.

    At most one request is in flight: submitting a new query cancels the
    stale one, whose `search()` call then returns None.
    """

    def __init__(
        self,
        transport: SearchTransport,
        *,
        fallback_text: str = FALLBACK_TEXT,
        network_fallback_text: str = NETWORK_FALLBACK_TEXT,
    ) -> None:
        self._transport = transport
        self._fallback_text = fallback_text
        self._network_fallback_text = network_fallback_text
        self._state = SearchState.IDLE
        self._error: str | None = None
        self._last_query: str | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state is SearchState.IN_FLIGHT

    @property
    def error(self) -> str | None:
        """Human-readable message from the most recent failed search."""
        return self._error

    @property
    def last_query(self) -> str | None:
        return self._last_query

    def cancel(self) -> bool:
        """Abort the in-flight request, if any. Returns whether one was cancelled."""
        if self._inflight is None or self._inflight.done():
            return False
        self._inflight.cancel()
        return True

    async def search(self, query: str) -> SearchResult | None:
        """Search for `query`.

        Returns None for a blank query (no request is made) or when a newer
        search superseded this one. Every other outcome is a SearchResult,
        a fallback one when the request failed.
        """
        result, _outcome = await self.search_with_outcome(query)
        return result

    async def search_with_outcome(
        self, query: str
    ) -> tuple[SearchResult | None, SearchState]:
        """Like `search`, but also report how this particular call ended.

        The outcome is COMPLETED for a real answer, FAILED for a fallback and
        IDLE when nothing came back. It belongs to this call alone, unlike
        `state`, which a newer search may already have moved on.
        """
        query = query.strip()
        if not query:
            return None, SearchState.IDLE

        if self.cancel():
            logger.info("Superseding in-flight search for %r", self._last_query)

        task = asyncio.create_task(self._transport.fetch_answer(query))
        self._inflight = task
        self._last_query = query
        self._state = SearchState.IN_FLIGHT
        self._error = None
        outcome = SearchState.IDLE

        try:
            raw = await task
            result = normalize(raw)
            outcome = SearchState.COMPLETED
            return result, outcome
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                task.cancel()
                raise
            logger.info("Search for %r was superseded", query)
            return None, outcome
        except NetworkError as exc:
            logger.warning("Search for %r could not reach the server: %s", query, exc)
            outcome = SearchState.FAILED
            self._set_error(task, "Could not reach the search service. Please try again.")
            return SearchResult(text=self._network_fallback_text), outcome
        except HttpStatusError as exc:
            logger.warning("Search for %r failed with status %d", query, exc.status_code)
            outcome = SearchState.FAILED
            self._set_error(task, str(exc))
            return SearchResult(text=self._fallback_text), outcome
        except Exception as exc:
            logger.exception("Unexpected error during search for %r", query)
            outcome = SearchState.FAILED
            self._set_error(task, str(exc) or "An unexpected error occurred")
            return SearchResult(text=self._fallback_text), outcome
        finally:
            # A superseded call must not touch the newer search's state
            if self._inflight is task:
                self._inflight = None
                self._state = outcome

    def _set_error(self, task: asyncio.Task, message: str) -> None:
        if self._inflight is task:
            self._error = message
