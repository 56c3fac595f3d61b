from __future__ import annotations

import logging
from typing import Any

import httpx

from photo_picker.config import get_credential
from photo_picker.models import SearchPage, SearchResult
from photo_picker.providers.base import as_dict, as_int, fetch_json, first_str

LOGGER = logging.getLogger(__name__)


class PexelsProvider:
    name = "pexels"
    endpoint = "https://api.pexels.com/v1/search"

    async def search(self, client: httpx.AsyncClient, query: str, page: int, per_page: int) -> SearchPage:
        api_key = get_credential(self.name)
        params = {"query": query, "per_page": per_page, "page": page}
        LOGGER.debug("[Pexels] query=%r page=%d per_page=%d", query, page, per_page)
        data = await fetch_json(self.name, client, self.endpoint, headers={"Authorization": api_key}, params=params)

        photos = data.get("photos")
        results = [self._to_result(p) for p in photos if isinstance(p, dict)] if isinstance(photos, list) else []
        total = as_int(data.get("total_results")) or 0
        return SearchPage(total=total, total_hits=total, results=results)

    @staticmethod
    def _to_result(photo: dict[str, Any]) -> SearchResult:
        src = as_dict(photo.get("src"))
        return SearchResult(
            id=str(photo.get("id")),
            label=first_str(photo.get("alt"), "photo"),
            thumbnail_url=first_str(src.get("tiny"), src.get("small")),
            medium_url=first_str(src.get("medium"), src.get("large")),
            full_url=first_str(src.get("large2x"), src.get("original"), src.get("large")),
            width=as_int(photo.get("width")),
            height=as_int(photo.get("height")),
        )
