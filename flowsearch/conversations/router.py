"""FastAPI routes the chat UI drives: search, history, selection, deletion."""

from fastapi import APIRouter, Depends, HTTPException, status

from flowsearch.conversations.schemas import (
    ConversationGroup,
    ConversationSummary,
    SearchRequest,
    SearchResponse,
    SessionStatus,
)
from flowsearch.conversations.session import ChatSession, ConversationNotFoundError
from flowsearch.models import Conversation

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


def get_chat_session() -> ChatSession:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("ChatSession not initialized")


@router.get("")
async def list_conversations(
    session: ChatSession = Depends(get_chat_session),
) -> list[ConversationSummary]:
    return [ConversationSummary.from_conversation(c) for c in session.conversations]


@router.get("/history")
async def conversation_history(
    session: ChatSession = Depends(get_chat_session),
) -> list[ConversationGroup]:
    return [
        ConversationGroup(
            label=label,
            conversations=[ConversationSummary.from_conversation(c) for c in group],
        )
        for label, group in session.history().items()
    ]


@router.get("/session")
async def session_status(
    session: ChatSession = Depends(get_chat_session),
) -> SessionStatus:
    orchestrator = session.orchestrator
    return SessionStatus(
        active_conversation_id=session.active_conversation_id,
        state=orchestrator.state.value,
        busy=orchestrator.is_busy,
        error=orchestrator.error,
    )


@router.post("/search")
async def search(
    request: SearchRequest,
    session: ChatSession = Depends(get_chat_session),
) -> SearchResponse:
    if not request.query.strip():
        return SearchResponse(conversation=session.active_conversation)
    conversation = await session.submit(request.query)
    return SearchResponse(conversation=conversation, error=session.orchestrator.error)


@router.post("/home", status_code=status.HTTP_204_NO_CONTENT)
async def go_home(
    session: ChatSession = Depends(get_chat_session),
) -> None:
    session.go_home()


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    session: ChatSession = Depends(get_chat_session),
) -> Conversation:
    try:
        return session.get(conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")


@router.post("/{conversation_id}/select")
async def select_conversation(
    conversation_id: str,
    session: ChatSession = Depends(get_chat_session),
) -> Conversation:
    try:
        return session.select(conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: str,
    session: ChatSession = Depends(get_chat_session),
) -> None:
    try:
        session.delete(conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")
