"""Same-origin pass-through to the prediction endpoint.

Lets a browser reach the upstream without cross-origin restrictions. Always
answers in the canonical `{text, sources}` shape; every failure, including a
body that is not JSON or a query that is not a string, becomes an HTTP 500
error envelope.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from flowsearch.models import SearchResult
from flowsearch.normalize import normalize
from flowsearch.proxy.schemas import ProxyErrorResponse, ProxySearchRequest
from flowsearch.transport.base import SearchTransport, TransportError

logger = logging.getLogger(__name__)

ERROR_TEXT = (
    "I'm sorry, but I encountered an error while processing your search."
    " Please try again later."
)
MISSING_QUERY = "Query parameter is required and must be a string"

router = APIRouter(prefix="/api", tags=["proxy"])


def get_upstream_transport() -> SearchTransport:
    """Dependency placeholder, overridden at startup."""
    raise RuntimeError("Upstream transport not configured")


def _error_response(message: str) -> JSONResponse:
    body = ProxyErrorResponse(error=f"Search failed: {message}", text=ERROR_TEXT)
    return JSONResponse(status_code=500, content=body.model_dump())


async def _read_query(request: Request) -> str | None:
    """Pull a non-blank string query out of the raw body, or None."""
    try:
        payload = json.loads(await request.body())
        body = ProxySearchRequest.model_validate(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return None
    return (body.query or "").strip() or None


@router.post(
    "/search-flowise",
    responses={500: {"model": ProxyErrorResponse}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ProxySearchRequest.model_json_schema()}},
        }
    },
)
async def search_flowise(
    request: Request,
    transport: SearchTransport = Depends(get_upstream_transport),
) -> SearchResult:
    """Forward a query upstream and return the normalized answer."""
    query = await _read_query(request)
    if query is None:
        logger.warning("Rejecting proxy request without a usable query")
        return _error_response(MISSING_QUERY)

    logger.info("Proxying query to %s", transport.name)
    try:
        raw = await transport.fetch_answer(query)
    except TransportError as exc:
        logger.error("Upstream search failed: %s", exc)
        return _error_response(str(exc))

    return normalize(raw)
