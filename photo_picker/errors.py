"""Error types raised across the picker."""

from __future__ import annotations


class PhotoPickerError(Exception):
    """Base exception for picker operations."""


class ConfigurationError(PhotoPickerError):
    """Raised when a provider credential or setting is missing."""


class ValidationError(PhotoPickerError):
    """Raised when an action is missing required input."""


class UpstreamFetchError(PhotoPickerError):
    """Raised when a provider search request fails."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class DownloadError(PhotoPickerError):
    """Raised when the chosen image cannot be fetched."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class StoreIOError(PhotoPickerError):
    """Raised when the location list cannot be read or written."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")
