"""Startup configuration resolved from the environment and an optional .env file."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


class ConfigurationError(Exception):
    pass


class Settings(BaseModel):
    endpoint_url: str
    transport: Literal["direct", "proxy"] = "direct"
    proxy_url: str | None = None
    timeout_seconds: float | None = None  # None waits indefinitely
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from `env`, or from .env plus os.environ when omitted.

    Raises ConfigurationError on a missing endpoint or inconsistent values.
    """
    if env is None:
        load_dotenv(ENV_FILE)
        env = os.environ

    endpoint_url = env.get("FLOWSEARCH_ENDPOINT_URL", "").strip()
    if not endpoint_url:
        raise ConfigurationError("FLOWSEARCH_ENDPOINT_URL is not set")
    _check_url("FLOWSEARCH_ENDPOINT_URL", endpoint_url)

    transport = env.get("FLOWSEARCH_TRANSPORT", "direct").strip().lower()
    if transport not in ("direct", "proxy"):
        raise ConfigurationError(
            f"Unknown FLOWSEARCH_TRANSPORT '{transport}'. Must be one of: direct, proxy"
        )

    proxy_url = env.get("FLOWSEARCH_PROXY_URL", "").strip() or None
    if transport == "proxy" and proxy_url is None:
        raise ConfigurationError("FLOWSEARCH_PROXY_URL is required when FLOWSEARCH_TRANSPORT=proxy")
    if proxy_url is not None:
        _check_url("FLOWSEARCH_PROXY_URL", proxy_url)

    timeout_seconds: float | None = None
    raw_timeout = env.get("FLOWSEARCH_TIMEOUT_SECONDS", "").strip()
    if raw_timeout:
        try:
            timeout_seconds = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"FLOWSEARCH_TIMEOUT_SECONDS is not a number: {raw_timeout}")
        if timeout_seconds <= 0:
            raise ConfigurationError("FLOWSEARCH_TIMEOUT_SECONDS must be positive")

    return Settings(
        endpoint_url=endpoint_url,
        transport=transport,
        proxy_url=proxy_url,
        timeout_seconds=timeout_seconds,
        cors_origins=load_cors_origins(env),
    )


def load_cors_origins(env: Mapping[str, str] | None = None) -> list[str]:
    """Allowed browser origins; needed before startup to configure middleware."""
    if env is None:
        load_dotenv(ENV_FILE)
        env = os.environ
    raw_origins = env.get("FLOWSEARCH_CORS_ORIGINS", "")
    return [o.strip() for o in raw_origins.split(",") if o.strip()] or list(DEFAULT_CORS_ORIGINS)


def _check_url(name: str, value: str) -> None:
    """Reject anything httpx could not send a request to."""
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"{name} is not a valid URL: {exc}")
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"{name} must be an absolute http(s) URL: {value}")
