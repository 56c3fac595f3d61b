from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from photo_picker.errors import ConfigurationError

DEFAULT_PROVIDER = "pixabay"

# Shared non-secret key for the default provider; the others fail closed without one.
PIXABAY_FALLBACK_KEY = "52178983-3a234cae41feb4b22280b11e3"

CREDENTIAL_ENV = {
    "pixabay": "PIXABAY_KEY",
    "unsplash": "UNSPLASH_ACCESS_KEY",
    "pexels": "PEXELS_API_KEY",
}
CREDENTIAL_FALLBACKS = {"pixabay": PIXABAY_FALLBACK_KEY}

DEFAULT_CSV_PATH = "locations.csv"
DEFAULT_OUTPUT_DIR = "downloads"

DEFAULT_QUERY = "london united kingdom"
SEARCH_DEFAULT_PER_PAGE = 12
SEARCH_MAX_PER_PAGE = 50


@dataclass
class RunConfig:
    csv_path: Path = field(default_factory=lambda: Path(DEFAULT_CSV_PATH))
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    provider: str = DEFAULT_PROVIDER

    # Collector
    target_count: int = 6
    page_size: int = 18
    max_attempts: int = 5

    http_timeout: float = 25.0


def get_credential(provider: str) -> str:
    env_name = CREDENTIAL_ENV.get(provider)
    if env_name is None:
        raise ConfigurationError(f"Unknown provider: {provider}")

    value = (os.getenv(env_name) or "").strip()
    if value:
        return value

    fallback = CREDENTIAL_FALLBACKS.get(provider)
    if fallback:
        return fallback
    raise ConfigurationError(f"{provider.capitalize()} API key not configured (set {env_name})")


def has_credential(provider: str) -> bool:
    try:
        get_credential(provider)
    except ConfigurationError:
        return False
    return True
