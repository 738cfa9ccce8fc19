"""Transport that talks to the hosted prediction endpoint directly."""

from typing import Any

from flowsearch.transport.base import HttpJsonTransport


class PredictionEndpointTransport(HttpJsonTransport):
    """POSTs `{"question", "overrideConfig"}` to a Flowise-style prediction URL."""

    @property
    def name(self) -> str:
        return "prediction"

    def _build_body(self, query: str) -> dict[str, Any]:
        return {"question": query, "overrideConfig": {}}
