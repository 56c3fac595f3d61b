from __future__ import annotations

import re
import unicodedata
from urllib.parse import urlparse

_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATORS = re.compile(r"[\s_]+", re.ASCII)
_UNSAFE_ID = re.compile(r"[^A-Za-z0-9_-]")


def slugify(text: str) -> str:
    """Lower-case, strip accents and punctuation, hyphenate whitespace.

    >>> slugify("São Paulo")
    'sao-paulo'
    """
    decomposed = unicodedata.normalize("NFKD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _NON_WORD.sub("", stripped).strip()
    return _SEPARATORS.sub("-", cleaned)


def safe_image_id(raw: str) -> str:
    return _UNSAFE_ID.sub("", raw)


def build_basename(city: str, country: str, image_id: str) -> str:
    return f"{slugify(city)}-{slugify(country)}-{safe_image_id(image_id)}"


def extension_from_url(url: str) -> str | None:
    try:
        name = urlparse(url).path.rsplit("/", 1)[-1]
    except ValueError:
        return None
    if "." not in name:
        return None
    suffix = name.rsplit(".", 1)[-1].lower()
    return suffix or None
