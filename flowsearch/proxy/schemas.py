"""Same-origin proxy request/response schemas."""

from pydantic import BaseModel, ConfigDict

from flowsearch.models import Source


class ProxySearchRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    query: str | None = None


class ProxyErrorResponse(BaseModel):
    error: str
    text: str
    sources: list[Source] = []
