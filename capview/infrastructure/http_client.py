from __future__ import annotations

import httpx

from .config import get_settings

_client: httpx.Client | None = None


def get_client() -> httpx.Client:
    global _client  # noqa: PLW0603
    if _client is None:
        settings = get_settings()
        headers = {"Accept": "application/json"}
        if settings.company_api_token:
            headers["Authorization"] = f"Bearer {settings.company_api_token}"
        _client = httpx.Client(
            base_url=settings.company_api_url,
            headers=headers,
            timeout=settings.company_api_timeout,
        )
    return _client


def set_client(client: httpx.Client | None) -> None:
    """Used in tests to inject a client backed by httpx.MockTransport."""
    global _client  # noqa: PLW0603
    _client = client


def close_client() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        _client.close()
        _client = None
