from __future__ import annotations

import httpx

from photo_picker.config import DEFAULT_PROVIDER, DEFAULT_QUERY, SEARCH_DEFAULT_PER_PAGE, SEARCH_MAX_PER_PAGE
from photo_picker.models import SearchPage
from photo_picker.providers.registry import get_provider


def clamp_paging(page: int | None, per_page: int | None) -> tuple[int, int]:
    page = max(int(page or 1), 1)
    per_page = min(max(int(per_page or SEARCH_DEFAULT_PER_PAGE), 1), SEARCH_MAX_PER_PAGE)
    return page, per_page


async def search_images(
    client: httpx.AsyncClient,
    query: str | None,
    *,
    page: int | None = 1,
    per_page: int | None = SEARCH_DEFAULT_PER_PAGE,
    source: str | None = DEFAULT_PROVIDER,
) -> SearchPage:
    """Search one provider for one page of photos.

    This is the single search entry point used by the collector and the
    ``search`` command. Paging values are clamped rather than rejected.
    """
    provider = get_provider(source or DEFAULT_PROVIDER)
    page, per_page = clamp_paging(page, per_page)
    text = (query or "").strip() or DEFAULT_QUERY
    return await provider.search(client, text, page, per_page)
