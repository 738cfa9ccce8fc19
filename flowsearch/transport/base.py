"""Abstract search transport interface, shared HTTP plumbing, and errors."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Base class for failures fetching an answer."""


class NetworkError(TransportError):
    """The request never reached the server or never came back.

    Browser cross-origin rejections look identical to connection failures,
    so no finer cause is available.
    """


class HttpStatusError(TransportError):
    """The server answered with a status outside 200-299."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Upstream returned {status_code}: {body}")


class SearchTransport(ABC):
    """Abstract interface for anything that can fetch a raw answer for a query."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport identifier (e.g., 'prediction')."""
        ...

    @abstractmethod
    async def fetch_answer(self, query: str) -> Any:
        """Send the query and return the decoded payload.

        The payload is whatever the server returned: a JSON value when the
        body parses, otherwise the raw body text.
        """
        ...


class HttpJsonTransport(SearchTransport):
    """Base transport for endpoints that take a JSON POST body.

    Subclasses only decide the URL and the request body.
    """

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._url = url
        self._client = client
        self._timeout = httpx.Timeout(timeout)

    @property
    def url(self) -> str:
        return self._url

    @abstractmethod
    def _build_body(self, query: str) -> dict[str, Any]:
        """Build the JSON request body for a query."""
        ...

    async def fetch_answer(self, query: str) -> Any:
        body = self._build_body(query)
        start = time.monotonic()
        try:
            if self._client is not None:
                response = await self._post(self._client, body)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, body)
        except httpx.InvalidURL as exc:
            logger.error("%s has an invalid URL %r: %s", self.name, self._url, exc)
            raise TransportError(f"Invalid URL {self._url}: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", self.name, exc)
            raise NetworkError(f"Could not reach {self._url}: {exc}") from exc
        latency_ms = int((time.monotonic() - start) * 1000)

        logger.info(
            "%s responded with status %d in %d ms",
            self.name, response.status_code, latency_ms,
        )
        if not response.is_success:
            raise HttpStatusError(response.status_code, response.text)

        return decode_body(response.text)

    async def _post(self, client: httpx.AsyncClient, body: dict[str, Any]) -> httpx.Response:
        return await client.post(
            self._url,
            json=body,
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )


def decode_body(text: str) -> Any:
    """Parse a response body as JSON, falling back to the raw text."""
    try:
        return json.loads(text)
    except ValueError:
        logger.debug("Response body is plain text, not JSON")
        return text
