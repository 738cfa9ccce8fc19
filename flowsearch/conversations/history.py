"""Search-history collaborator interface.

Durable storage of past searches belongs to an external service (whatever
backs the signed-in user's account); the chat session only needs this hook.
"""

from abc import ABC, abstractmethod

from flowsearch.models import Source


class SearchHistoryRecorder(ABC):
    """Abstract sink for completed searches of the current user."""

    @abstractmethod
    async def save_search_history(
        self, query: str, answer_text: str, sources: list[Source]
    ) -> None:
        ...
