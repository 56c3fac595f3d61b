from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable

from photo_picker.errors import PhotoPickerError
from photo_picker.models import GatherResult, SearchPage, SearchResult

LOGGER = logging.getLogger(__name__)

TARGET_COUNT = 6
PAGE_SIZE = 18
MAX_ATTEMPTS = 5

PageFetcher = Callable[[int, int], Awaitable[SearchPage]]


async def gather(
    fetch_page: PageFetcher,
    *,
    start_page: int = 1,
    seen_ids: Iterable[str] = frozenset(),
    target: int = TARGET_COUNT,
    page_size: int = PAGE_SIZE,
    max_attempts: int = MAX_ATTEMPTS,
) -> GatherResult:
    """Collect up to ``target`` results whose ids are not in ``seen_ids``.

    Pages are fetched from ``start_page`` onwards. The loop stops once the
    batch is full, after a page with no results, or after ``max_attempts``
    pages. The returned ``next_page`` is where a later gather should resume.

    A failed fetch discards the partial batch: the result is empty, the seen
    ids are returned unchanged and ``error`` carries the message.
    """
    seen_before = frozenset(seen_ids)
    seen = set(seen_before)
    batch: list[SearchResult] = []
    page = start_page
    attempts = 0

    try:
        while len(batch) < target and attempts < max_attempts:
            search_page = await fetch_page(page, page_size)
            page += 1
            attempts += 1

            for result in search_page.results:
                if result.id in seen:
                    continue
                batch.append(result)
                seen.add(result.id)
                if len(batch) >= target:
                    break

            LOGGER.debug(
                "gather page=%d raw=%d batch=%d/%d", page - 1, len(search_page.results), len(batch), target
            )
            if not search_page.results:
                break
    except PhotoPickerError as exc:
        LOGGER.warning("gather aborted at page %d: %s", page, exc)
        return GatherResult(
            results=[], seen_ids=seen_before, next_page=start_page, pages_fetched=attempts, error=str(exc)
        )

    # next_page is past the last fetched page; its unoffered results are not revisited.
    return GatherResult(results=batch, seen_ids=frozenset(seen), next_page=page, pages_fetched=attempts)
