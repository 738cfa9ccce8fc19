"""Build the configured search transport."""

import httpx

from flowsearch.config import Settings
from flowsearch.transport.base import SearchTransport
from flowsearch.transport.prediction import PredictionEndpointTransport
from flowsearch.transport.proxy import ProxyTransport


def build_transport(settings: Settings, client: httpx.AsyncClient | None = None) -> SearchTransport:
    """Return the transport the chat session should use."""
    if settings.transport == "proxy":
        # Settings validation guarantees proxy_url is set in proxy mode
        return ProxyTransport(
            settings.proxy_url, client=client, timeout=settings.timeout_seconds,
        )
    return PredictionEndpointTransport(
        settings.endpoint_url, client=client, timeout=settings.timeout_seconds,
    )
