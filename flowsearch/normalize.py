"""Normalize upstream answer payloads into the canonical SearchResult.

The prediction endpoint's response shape is not contractually fixed, so
decoding is permissive: each known shape is tried in priority order and
anything unrecognized degrades to an opaque variant carrying the payload
serialized as JSON. Nothing in this module raises.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import ValidationError

from flowsearch.models import SearchResult, Source

logger = logging.getLogger(__name__)


class ResponseShape(Enum):
    """Closed set of payload shapes, in decoding priority order."""

    PLAIN_TEXT = "plain_text"
    TEXT = "text"
    ANSWER = "answer"
    RESPONSE = "response"
    OPAQUE = "opaque"


# Mapping keys checked for the answer text, highest priority first
_TEXT_KEYS: tuple[tuple[str, ResponseShape], ...] = (
    ("text", ResponseShape.TEXT),
    ("answer", ResponseShape.ANSWER),
    ("response", ResponseShape.RESPONSE),
)


@dataclass(frozen=True)
class DecodedResponse:
    shape: ResponseShape
    text: str
    sources: list[Source] = field(default_factory=list)

    def to_result(self) -> SearchResult:
        return SearchResult(text=self.text, sources=list(self.sources))


def decode(raw: Any) -> DecodedResponse:
    """Classify a raw payload into one of the known response shapes."""
    if isinstance(raw, str):
        return DecodedResponse(ResponseShape.PLAIN_TEXT, raw)

    if isinstance(raw, Mapping):
        for key, shape in _TEXT_KEYS:
            value = raw.get(key)
            if value is not None:
                return DecodedResponse(
                    shape,
                    value if isinstance(value, str) else serialize(value),
                    coerce_sources(raw.get("sources")),
                )

    return DecodedResponse(ResponseShape.OPAQUE, serialize(raw))


def normalize(raw: Any) -> SearchResult:
    """Map any decoded payload to `{text, sources}`."""
    decoded = decode(raw)
    if decoded.shape is ResponseShape.OPAQUE:
        logger.info("Unrecognized response shape, returning serialized payload")
    return decoded.to_result()


def serialize(value: Any) -> str:
    """Compact JSON, matching what a browser's JSON.stringify would produce."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def coerce_sources(raw_sources: Any) -> list[Source]:
    """Turn an upstream `sources` value into Source models, skipping junk.

    Mappings without a title fall back to their url; bare strings become
    title-only sources. Order is preserved.
    """
    if not isinstance(raw_sources, list):
        return []

    sources: list[Source] = []
    for item in raw_sources:
        if isinstance(item, str):
            sources.append(Source(title=item))
        elif isinstance(item, Mapping):
            data = dict(item)
            if data.get("title") is None:
                data["title"] = data.get("url") or ""
            try:
                sources.append(Source.model_validate(data))
            except ValidationError:
                logger.debug("Skipping malformed source entry: %r", item)
        else:
            logger.debug("Skipping non-object source entry: %r", item)
    return sources
