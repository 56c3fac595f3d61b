"""Shared test fixtures for the photo picker."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx
import pytest

from photo_picker.models import SearchPage, SearchResult


def _result(image_id: str) -> SearchResult:
    return SearchResult(
        id=image_id,
        label=f"photo {image_id}",
        thumbnail_url=f"https://img.example.com/{image_id}_thumb.jpg",
        medium_url=f"https://img.example.com/{image_id}_640.jpg",
        full_url=f"https://img.example.com/{image_id}_1280.jpg",
        width=1280,
        height=853,
    )


@pytest.fixture(autouse=True)
def _clean_provider_env(monkeypatch):
    """Keep real credentials from the developer's shell out of the tests."""
    for name in ("PIXABAY_KEY", "UNSPLASH_ACCESS_KEY", "PEXELS_API_KEY", "PHOTO_PICKER_CSV", "PHOTO_PICKER_OUTPUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_result() -> Callable[[str], SearchResult]:
    return _result


@pytest.fixture
def make_page() -> Callable[..., SearchPage]:
    """Build a SearchPage from a list of ids."""

    def _make(ids: list[str], total: int | None = None) -> SearchPage:
        results = [_result(i) for i in ids]
        count = len(results) if total is None else total
        return SearchPage(total=count, total_hits=count, results=results)

    return _make


@pytest.fixture
def write_csv(tmp_path) -> Callable[[str], Path]:
    def _write(text: str, name: str = "locations.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """AsyncClient whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
