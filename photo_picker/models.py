from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(slots=True)
class Record:
    city: str
    country: str
    type: str | None = None
    filename: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.city, self.country)

    @property
    def is_done(self) -> bool:
        return bool(self.filename and self.filename.strip())


@dataclass(slots=True)
class SearchResult:
    id: str
    label: str
    thumbnail_url: str
    medium_url: str
    full_url: str
    width: int | None = None
    height: int | None = None

    @property
    def best_url(self) -> str:
        return self.full_url or self.medium_url

    @property
    def display_url(self) -> str:
        return self.medium_url or self.thumbnail_url

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "thumbnailUrl": self.thumbnail_url,
            "mediumUrl": self.medium_url,
            "fullUrl": self.full_url,
        }
        if self.width is not None:
            payload["width"] = self.width
        if self.height is not None:
            payload["height"] = self.height
        return payload


@dataclass(slots=True)
class SearchPage:
    total: int
    total_hits: int
    results: list[SearchResult] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "totalHits": self.total_hits,
            "hits": [r.to_payload() for r in self.results],
        }


@dataclass(slots=True)
class GatherResult:
    results: list[SearchResult]
    seen_ids: frozenset[str]
    next_page: int
    pages_fetched: int = 0
    error: str | None = None


ActionStatus = Literal["idle", "success", "error"]


@dataclass(slots=True)
class ActionState:
    status: ActionStatus = "idle"
    message: str | None = None
    filename: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
