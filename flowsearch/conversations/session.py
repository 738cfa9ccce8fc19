"""Chat session: the conversation collection plus which one is active.

Ties the orchestrator and the store together the way the search page does:
a submitted query lands in the active conversation (or starts a new one),
and the answer is appended once it arrives.
"""

import asyncio
import logging
from datetime import datetime

from flowsearch.conversations import store
from flowsearch.conversations.history import SearchHistoryRecorder
from flowsearch.models import Conversation, SearchResult
from flowsearch.search.service import SearchOrchestrator, SearchState

logger = logging.getLogger(__name__)


class ConversationNotFoundError(Exception):
    pass


class ChatSession:
    """Conversation list and active selection for one UI."""

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        *,
        history: SearchHistoryRecorder | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._history = history
        self._conversations: list[Conversation] = []
        self._active_id: str | None = None
        self._background: set[asyncio.Task] = set()

    @property
    def orchestrator(self) -> SearchOrchestrator:
        return self._orchestrator

    @property
    def conversations(self) -> list[Conversation]:
        return list(self._conversations)

    @property
    def active_conversation_id(self) -> str | None:
        return self._active_id

    @property
    def active_conversation(self) -> Conversation | None:
        if self._active_id is None:
            return None
        return store.find_conversation(self._conversations, self._active_id)

    def get(self, conversation_id: str) -> Conversation:
        conversation = store.find_conversation(self._conversations, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def submit(self, query: str) -> Conversation | None:
        """Ask `query` in the active conversation, or in a new one.

        Returns the conversation after the answer was appended, or None for
        a blank query. A superseded search leaves only the user message.
        """
        query = query.strip()
        if not query:
            return None

        active = self.active_conversation
        if active is not None:
            conversation = store.append_user_message(active, query)
        else:
            conversation = store.create_conversation(query)
            self._active_id = conversation.id
        self._conversations = store.upsert(self._conversations, conversation)

        result, outcome = await self._orchestrator.search_with_outcome(query)
        if result is None:
            return store.find_conversation(self._conversations, conversation.id)

        # Re-read: the conversation may have changed or gone while we waited
        current = store.find_conversation(self._conversations, conversation.id)
        if current is None:
            logger.info("Conversation %s was deleted before its answer arrived", conversation.id)
            return None

        updated = store.append_ai_message(current, result)
        self._conversations = store.upsert(self._conversations, updated)

        if outcome is SearchState.COMPLETED:
            self._record_history(query, result)
        return updated

    def select(self, conversation_id: str) -> Conversation:
        conversation = self.get(conversation_id)
        self._active_id = conversation.id
        return conversation

    def go_home(self) -> None:
        """Clear the active selection; the next query starts a new conversation."""
        self._active_id = None

    def delete(self, conversation_id: str) -> None:
        self.get(conversation_id)
        self._conversations = store.delete_conversation(self._conversations, conversation_id)
        if self._active_id == conversation_id:
            self._active_id = None

    def history(self, now: datetime | None = None) -> dict[str, list[Conversation]]:
        return store.group_by_day(self._conversations, now)

    async def drain(self) -> None:
        """Wait for pending history writes. Used at shutdown and in tests."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _record_history(self, query: str, result: SearchResult) -> None:
        if self._history is None:
            return
        task = asyncio.create_task(
            self._history.save_search_history(query, result.text, list(result.sources))
        )
        self._background.add(task)
        task.add_done_callback(self._on_history_done)

    def _on_history_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Saving search history failed: %s", exc)
