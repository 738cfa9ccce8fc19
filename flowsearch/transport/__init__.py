"""Search transports: how a query reaches the prediction endpoint."""

from flowsearch.transport.base import (
    HttpStatusError,
    NetworkError,
    SearchTransport,
    TransportError,
)
from flowsearch.transport.prediction import PredictionEndpointTransport
from flowsearch.transport.proxy import ProxyTransport

__all__ = [
    "HttpStatusError",
    "NetworkError",
    "PredictionEndpointTransport",
    "ProxyTransport",
    "SearchTransport",
    "TransportError",
]
