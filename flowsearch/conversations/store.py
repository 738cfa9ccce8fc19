"""Pure state transitions over conversations.

Conversations are frozen models; every function returns a new value and
leaves its inputs untouched. The collection is a plain list kept in
most-recently-touched-first order by `upsert`.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from flowsearch.models import ChatMessage, Conversation, SearchResult

TITLE_MAX_LENGTH = 50
ELLIPSIS = "…"


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


def make_title(query: str) -> str:
    """First query as the title, cut to TITLE_MAX_LENGTH characters plus an ellipsis."""
    if len(query) > TITLE_MAX_LENGTH:
        return query[:TITLE_MAX_LENGTH] + ELLIPSIS
    return query


def make_user_message(query: str) -> ChatMessage:
    return ChatMessage(
        id=_new_id("msg"),
        type="user",
        content=query,
        timestamp=datetime.now(UTC),
    )


def make_ai_message(result: SearchResult) -> ChatMessage:
    return ChatMessage(
        id=_new_id("msg"),
        type="ai",
        content=result.text,
        sources=list(result.sources),
        timestamp=datetime.now(UTC),
    )


def create_conversation(query: str) -> Conversation:
    """Start a conversation seeded with the user's first message."""
    message = make_user_message(query)
    return Conversation(
        id=_new_id("conv"),
        title=make_title(query),
        timestamp=message.timestamp,
        message_count=1,
        messages=[message],
    )


def _append(conversation: Conversation, message: ChatMessage) -> Conversation:
    messages = [*conversation.messages, message]
    return conversation.model_copy(
        update={
            "messages": messages,
            "message_count": len(messages),
            "timestamp": message.timestamp,
        }
    )


def append_user_message(conversation: Conversation, query: str) -> Conversation:
    return _append(conversation, make_user_message(query))


def append_ai_message(conversation: Conversation, result: SearchResult) -> Conversation:
    return _append(conversation, make_ai_message(result))


def upsert(collection: list[Conversation], conversation: Conversation) -> list[Conversation]:
    """Replace any entry with the same id and move the conversation to the front."""
    return [conversation, *(c for c in collection if c.id != conversation.id)]


def delete_conversation(collection: list[Conversation], conversation_id: str) -> list[Conversation]:
    return [c for c in collection if c.id != conversation_id]


def find_conversation(collection: list[Conversation], conversation_id: str) -> Conversation | None:
    return next((c for c in collection if c.id == conversation_id), None)


def day_label(timestamp: datetime, now: datetime) -> str:
    """'Today' within 24 hours, 'Yesterday' within 48, else the ISO date."""
    age = abs(now - timestamp)
    if age < timedelta(hours=24):
        return "Today"
    if age < timedelta(hours=48):
        return "Yesterday"
    return timestamp.date().isoformat()


def group_by_day(
    collection: list[Conversation], now: datetime | None = None
) -> dict[str, list[Conversation]]:
    """Bucket conversations under day labels, keeping collection order."""
    now = now or datetime.now(UTC)
    groups: dict[str, list[Conversation]] = {}
    for conversation in collection:
        groups.setdefault(day_label(conversation.timestamp, now), []).append(conversation)
    return groups
