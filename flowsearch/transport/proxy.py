"""Transport that goes through the same-origin search proxy.

The proxy already returns the canonical `{text, sources}` shape, and answers
failures with HTTP 500 plus an error envelope, which surfaces here as an
HttpStatusError carrying that envelope as its body.
"""

from typing import Any

from flowsearch.transport.base import HttpJsonTransport


class ProxyTransport(HttpJsonTransport):

    @property
    def name(self) -> str:
        return "proxy"

    def _build_body(self, query: str) -> dict[str, Any]:
        return {"query": query}
