"""Canonical data structures for Flowsearch.

Defined once here, referenced everywhere else. Every upstream answer shape is
normalized into a SearchResult; conversations are immutable values that the
store replaces rather than mutates.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


class Source(BaseModel):
    """A citation returned alongside an answer."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str | None = None
    snippet: str | None = None


class SearchResult(BaseModel):
    """Canonical answer: always has text, sources default to empty."""

    model_config = ConfigDict(frozen=True)

    text: str
    sources: list[Source] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

MessageType = Literal["user", "ai"]


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: MessageType
    content: str
    sources: list[Source] | None = None
    timestamp: datetime


class Conversation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    timestamp: datetime  # last update
    message_count: int
    messages: list[ChatMessage]
