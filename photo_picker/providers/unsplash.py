from __future__ import annotations

import logging
from typing import Any

import httpx

from photo_picker.config import get_credential
from photo_picker.models import SearchPage, SearchResult
from photo_picker.providers.base import as_dict, as_int, fetch_json, first_str

LOGGER = logging.getLogger(__name__)


class UnsplashProvider:
    name = "unsplash"
    endpoint = "https://api.unsplash.com/search/photos"

    async def search(self, client: httpx.AsyncClient, query: str, page: int, per_page: int) -> SearchPage:
        access_key = get_credential(self.name)
        headers = {
            "Authorization": f"Client-ID {access_key}",
            "Accept-Version": "v1",
        }
        params = {
            "query": f"destination {query}",
            "page": page,
            "per_page": per_page,
            "orientation": "landscape",
            "content_filter": "high",
        }
        LOGGER.debug("[Unsplash] query=%r page=%d per_page=%d", query, page, per_page)
        data = await fetch_json(self.name, client, self.endpoint, headers=headers, params=params)

        photos = data.get("results")
        results = [self._to_result(p) for p in photos if isinstance(p, dict)] if isinstance(photos, list) else []
        total = as_int(data.get("total")) or 0
        return SearchPage(total=total, total_hits=total, results=results)

    @staticmethod
    def _to_result(photo: dict[str, Any]) -> SearchResult:
        urls = as_dict(photo.get("urls"))
        return SearchResult(
            id=str(photo.get("id")),
            label=first_str(photo.get("alt_description"), photo.get("description"), "photo"),
            thumbnail_url=first_str(urls.get("thumb")),
            medium_url=first_str(urls.get("small")),
            full_url=first_str(urls.get("regular"), urls.get("full")),
            width=as_int(photo.get("width")),
            height=as_int(photo.get("height")),
        )
