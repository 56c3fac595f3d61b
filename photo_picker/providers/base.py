"""Protocol for stock-photo search providers."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx

from photo_picker.errors import UpstreamFetchError
from photo_picker.http_utils import request_once
from photo_picker.models import SearchPage


@runtime_checkable
class SearchProvider(Protocol):
    """One stock-photo service.

    Implementations: PixabayProvider, UnsplashProvider, PexelsProvider.
    """

    name: str

    async def search(self, client: httpx.AsyncClient, query: str, page: int, per_page: int) -> SearchPage:
        """Run one search request and map the response to a SearchPage.

        Raises:
            ConfigurationError: the provider credential is missing.
            UpstreamFetchError: the request failed or returned a non-2xx status.
        """
        ...


async def fetch_json(provider: str, client: httpx.AsyncClient, url: str, **kwargs: Any) -> dict[str, Any]:
    def _error(message: str, status_code: int | None) -> Exception:
        return UpstreamFetchError(provider, f"Failed to fetch from {provider.capitalize()}: {message}", status_code)

    resp = await request_once(client, "GET", url, error_factory=_error, **kwargs)
    try:
        data = resp.json()
    except ValueError as exc:
        raise UpstreamFetchError(provider, f"Invalid JSON from {provider.capitalize()}") from exc
    if not isinstance(data, dict):
        raise UpstreamFetchError(provider, f"Unexpected response shape from {provider.capitalize()}")
    return data


def as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return None


def first_str(*values: Any) -> str:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return ""


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}
