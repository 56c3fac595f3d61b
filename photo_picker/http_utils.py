from __future__ import annotations

from typing import Any, Callable

import httpx

DEFAULT_HEADERS = {
    "User-Agent": "travel-photo-picker/0.1",
    "Accept": "application/json, image/*;q=0.9, */*;q=0.5",
}

DEFAULT_TIMEOUT = 25.0

ErrorFactory = Callable[[str, "int | None"], Exception]


def build_client(timeout: float = DEFAULT_TIMEOUT, **kwargs: Any) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout, headers=DEFAULT_HEADERS, **kwargs)


async def request_once(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    error_factory: ErrorFactory,
    **kwargs: Any,
) -> httpx.Response:
    """Send a single request and return the successful response.

    There is no retry: searches and downloads are attempted once and the
    operator retries by hand. Transport failures and non-2xx responses are
    turned into the caller's error type through ``error_factory(message,
    status_code)``.
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as exc:
        raise error_factory(f"{type(exc).__name__}: {exc}", None) from exc

    if not response.is_success:
        reason = response.reason_phrase or "error"
        raise error_factory(f"HTTP {response.status_code} {reason}", response.status_code)
    return response
