from __future__ import annotations

import logging
from typing import Any

import httpx

from photo_picker.config import get_credential
from photo_picker.models import SearchPage, SearchResult
from photo_picker.providers.base import as_int, fetch_json, first_str

LOGGER = logging.getLogger(__name__)


class PixabayProvider:
    name = "pixabay"
    endpoint = "https://pixabay.com/api/"

    async def search(self, client: httpx.AsyncClient, query: str, page: int, per_page: int) -> SearchPage:
        key = get_credential(self.name)
        params = {
            "key": key,
            "q": f"destination {query}",
            "per_page": per_page,
            "page": page,
        }
        LOGGER.debug("[Pixabay] query=%r page=%d per_page=%d", query, page, per_page)
        data = await fetch_json(self.name, client, self.endpoint, params=params)

        hits = data.get("hits")
        results = [self._to_result(h) for h in hits if isinstance(h, dict)] if isinstance(hits, list) else []
        return SearchPage(
            total=as_int(data.get("total")) or 0,
            total_hits=as_int(data.get("totalHits")) or 0,
            results=results,
        )

    @staticmethod
    def _to_result(hit: dict[str, Any]) -> SearchResult:
        return SearchResult(
            id=str(hit.get("id")),
            label=first_str(hit.get("tags"), "photo"),
            thumbnail_url=first_str(hit.get("previewURL")),
            medium_url=first_str(hit.get("webformatURL")),
            full_url=first_str(hit.get("largeImageURL")),
            width=as_int(hit.get("imageWidth")),
            height=as_int(hit.get("imageHeight")),
        )
