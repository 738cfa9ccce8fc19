"""Conversation API request/response schemas."""

from datetime import datetime

from pydantic import BaseModel

from flowsearch.models import Conversation


class SearchRequest(BaseModel):
    query: str


class ConversationSummary(BaseModel):
    id: str
    title: str
    timestamp: datetime
    message_count: int

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationSummary":
        return cls(
            id=conversation.id,
            title=conversation.title,
            timestamp=conversation.timestamp,
            message_count=conversation.message_count,
        )


class ConversationGroup(BaseModel):
    label: str  # "Today", "Yesterday", or an ISO date
    conversations: list[ConversationSummary]


class SessionStatus(BaseModel):
    active_conversation_id: str | None = None
    state: str
    busy: bool
    error: str | None = None


class SearchResponse(BaseModel):
    conversation: Conversation | None = None
    error: str | None = None
