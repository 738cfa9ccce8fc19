"""Flowsearch FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowsearch.config import load_cors_origins, load_settings
from flowsearch.conversations.router import get_chat_session
from flowsearch.conversations.router import router as conversations_router
from flowsearch.conversations.session import ChatSession
from flowsearch.proxy.router import get_upstream_transport
from flowsearch.proxy.router import router as proxy_router
from flowsearch.search.service import SearchOrchestrator
from flowsearch.transport.factory import build_transport
from flowsearch.transport.prediction import PredictionEndpointTransport

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared HTTP client and wire services."""
    settings = load_settings()
    client = httpx.AsyncClient()

    # The proxy route always talks to the upstream directly
    upstream = PredictionEndpointTransport(
        settings.endpoint_url, client=client, timeout=settings.timeout_seconds,
    )
    app.dependency_overrides[get_upstream_transport] = lambda: upstream

    orchestrator = SearchOrchestrator(build_transport(settings, client))
    session = ChatSession(orchestrator)
    app.dependency_overrides[get_chat_session] = lambda: session

    app.state.settings = settings
    yield

    orchestrator.cancel()
    await session.drain()
    await client.aclose()


app = FastAPI(
    title="Flowsearch",
    description="Chat-style search over a hosted question-answering endpoint",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(proxy_router)
app.include_router(conversations_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": VERSION}
