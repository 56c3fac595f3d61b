from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from photo_picker.errors import DownloadError
from photo_picker.http_utils import request_once
from photo_picker.naming import extension_from_url

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"

_CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/avif": "avif",
}


def guess_extension(url: str, content_type: str | None, data: bytes) -> str:
    ext = extension_from_url(url)
    if ext:
        return ext

    if content_type:
        ct = content_type.split(";")[0].strip().lower()
        if ct in _CONTENT_TYPE_EXTENSIONS:
            return _CONTENT_TYPE_EXTENSIONS[ct]

    # Some CDN urls (e.g. Unsplash) carry no suffix and a generic content type.
    try:
        with Image.open(BytesIO(data)) as im:
            fmt = (im.format or "").strip().lower()
    except (UnidentifiedImageError, OSError):
        fmt = ""

    if fmt in {"jpeg", "jpg", "mpo"}:
        return "jpg"
    if fmt in {"png", "webp", "gif", "bmp", "tiff"}:
        return fmt
    return DEFAULT_EXTENSION


class ImageDownloader:
    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    async def download(self, client: httpx.AsyncClient, url: str, basename: str) -> str:
        """Fetch ``url`` into the output directory and return the file name.

        An existing file with the same name is overwritten.
        """

        def _error(message: str, status_code: int | None) -> Exception:
            return DownloadError(url, f"Failed to download image: {message}", status_code)

        resp = await request_once(client, "GET", url, error_factory=_error, follow_redirects=True)
        data = resp.content

        ext = guess_extension(url, resp.headers.get("content-type"), data)
        filename = f"{basename}.{ext}"
        save_path = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            save_path.write_bytes(data)
        except OSError as exc:
            raise DownloadError(url, f"Failed to save image to {save_path}: {exc.strerror or exc}") from exc

        LOGGER.info("Saved %s (%d bytes)", save_path, len(data))
        return filename
