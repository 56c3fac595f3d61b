from __future__ import annotations

from photo_picker.errors import ValidationError
from photo_picker.providers.base import SearchProvider
from photo_picker.providers.pexels import PexelsProvider
from photo_picker.providers.pixabay import PixabayProvider
from photo_picker.providers.unsplash import UnsplashProvider

PROVIDERS: dict[str, type] = {
    PixabayProvider.name: PixabayProvider,
    UnsplashProvider.name: UnsplashProvider,
    PexelsProvider.name: PexelsProvider,
}


def normalize_provider_name(name: str) -> str:
    key = (name or "").strip().lower()
    if key not in PROVIDERS:
        raise ValidationError(f"Unknown provider: {name!r} (choose from {', '.join(PROVIDERS)})")
    return key


def get_provider(name: str) -> SearchProvider:
    return PROVIDERS[normalize_provider_name(name)]()
