"""Per-location assignment loop.

``PickerSession`` walks the locations that still lack a filename. For the
current location it gathers a batch of unseen candidates from the selected
provider; the operator then picks one (download + list update, then move on),
asks for more, switches provider, or skips.

Every change of location, provider or page bumps a generation token. A
gather started under an older token finishes without touching the session.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, Sequence

import httpx

from photo_picker.collector import gather
from photo_picker.config import DEFAULT_PROVIDER, RunConfig
from photo_picker.downloader import ImageDownloader
from photo_picker.errors import PhotoPickerError, ValidationError
from photo_picker.journal import JsonlLogger
from photo_picker.models import ActionState, Record, SearchPage, SearchResult
from photo_picker.naming import build_basename, safe_image_id
from photo_picker.providers.registry import normalize_provider_name
from photo_picker.records import RecordStore
from photo_picker.search import search_images

LOGGER = logging.getLogger(__name__)

SearchFn = Callable[..., Awaitable[SearchPage]]


class SessionState(str, Enum):
    IDLE = "idle"
    BROWSING = "browsing"
    PERSISTING = "persisting"
    ALL_DONE = "all_done"
    NO_MATCHES = "no_matches"


async def assign_image(
    client: httpx.AsyncClient,
    *,
    city: str,
    country: str,
    image_id: str,
    image_url: str,
    store: RecordStore,
    downloader: ImageDownloader,
    provider: str | None = None,
    journal: JsonlLogger | None = None,
) -> ActionState:
    """Download the chosen image and record its filename for the location."""
    city, country = (city or "").strip(), (country or "").strip()
    image_id, image_url = str(image_id or "").strip(), (image_url or "").strip()

    try:
        if not city or not country or not image_url or not image_id:
            raise ValidationError("Missing required fields")
        safe_id = safe_image_id(image_id)
        if not safe_id:
            raise ValidationError("Invalid image id")

        filename = await downloader.download(client, image_url, build_basename(city, country, safe_id))
        store.set_filename(city, country, filename)
        state = ActionState("success", "Downloaded and CSV updated", filename)
    except PhotoPickerError as exc:
        LOGGER.warning("Assignment failed for %s, %s: %s", city, country, exc)
        state = ActionState("error", str(exc))

    if journal is not None:
        journal.append(
            {
                "city": city,
                "country": country,
                "provider": provider,
                "image_id": image_id,
                "url": image_url,
                "status": state.status,
                "message": state.message,
                "filename": state.filename,
            }
        )
    return state


def normalize_letter(letter: str | None) -> str | None:
    if letter is None or not letter.strip():
        return None
    first = letter.strip()[0]
    if not first.isalpha():
        raise ValidationError(f"Filter must be a letter, got {letter!r}")
    return first.upper()


class PickerSession:
    def __init__(
        self,
        records: Sequence[Record],
        *,
        store: RecordStore,
        downloader: ImageDownloader,
        config: RunConfig | None = None,
        provider: str = DEFAULT_PROVIDER,
        letter: str | None = None,
        journal: JsonlLogger | None = None,
        search: SearchFn = search_images,
    ) -> None:
        self.config = config or RunConfig()
        self.store = store
        self.downloader = downloader
        self.journal = journal
        self._search = search

        self.pending_records = [r for r in records if not r.is_done]
        self.provider = normalize_provider_name(provider)
        self.letter = normalize_letter(letter)
        self.working = self._filtered()

        self.candidates: list[SearchResult] = []
        self.seen_ids: frozenset[str] = frozenset()
        self.page = 1
        self.last_error: str | None = None
        self.last_action = ActionState()

        self._index = 0
        self._next_page = 1
        self._generation = 0
        self._loading_generation: int | None = None
        self._started = False
        self.pending = False

    # -- cursor -----------------------------------------------------------

    def _filtered(self) -> list[Record]:
        # Records picked earlier in this session are done by now.
        remaining = [r for r in self.pending_records if not r.is_done]
        if self.letter is None:
            return remaining
        return [r for r in remaining if r.country[:1].upper() == self.letter]

    def _enter_record(self) -> None:
        self.candidates = []
        self.seen_ids = frozenset()
        self.page = 1
        self._next_page = 1
        self.last_error = None
        self._generation += 1

    def _advance(self) -> None:
        self._index += 1
        self._enter_record()

    @property
    def current(self) -> Record | None:
        if not self._started or self._index >= len(self.working):
            return None
        return self.working[self._index]

    @property
    def query(self) -> str:
        record = self.current
        if record is None:
            return ""
        return f"{record.city} {record.country}".strip()

    @property
    def position(self) -> tuple[int, int]:
        return self._index + 1, len(self.working)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._loading_generation == self._generation

    @property
    def state(self) -> SessionState:
        if not self._started:
            return SessionState.IDLE
        if self.pending:
            return SessionState.PERSISTING
        if self.current is not None:
            return SessionState.BROWSING
        remaining = any(not r.is_done for r in self.pending_records)
        if not self.working and self.letter is not None and remaining:
            return SessionState.NO_MATCHES
        return SessionState.ALL_DONE

    def start(self) -> SessionState:
        self._started = True
        self._index = 0
        self._enter_record()
        return self.state

    def set_filter(self, letter: str | None) -> SessionState:
        self.letter = normalize_letter(letter)
        self.working = self._filtered()
        self._started = True
        self._index = 0
        self._enter_record()
        LOGGER.info("Filter set to %s (%d locations)", self.letter or "all", len(self.working))
        return self.state

    def set_provider(self, name: str) -> None:
        self.provider = normalize_provider_name(name)
        self._enter_record()

    def skip(self) -> bool:
        if self.pending or self.current is None:
            return False
        LOGGER.info("Skipped %s, %s", self.current.city, self.current.country)
        self._advance()
        return True

    def show_more(self) -> bool:
        if self.pending or self.loading or self.current is None:
            return False
        self.page = self._next_page
        self._generation += 1
        return True

    # -- async operations ---------------------------------------------------

    async def load_candidates(self, client: httpx.AsyncClient) -> bool:
        """Gather a fresh candidate batch for the current location.

        Returns False when nothing was applied: no current location, a load
        already running, or the session moved on while this one was running.
        """
        if self.current is None or self.loading:
            return False

        token = self._generation
        query, provider = self.query, self.provider

        async def fetch_page(page: int, per_page: int) -> SearchPage:
            return await self._search(client, query, page=page, per_page=per_page, source=provider)

        self._loading_generation = token
        try:
            result = await gather(
                fetch_page,
                start_page=self.page,
                seen_ids=self.seen_ids,
                target=self.config.target_count,
                page_size=self.config.page_size,
                max_attempts=self.config.max_attempts,
            )
        finally:
            if self._loading_generation == token:
                self._loading_generation = None

        if token != self._generation:
            LOGGER.debug("Discarding stale gather for %r (%s)", query, provider)
            return False

        self.candidates = result.results
        self.seen_ids = result.seen_ids
        self._next_page = result.next_page
        self.last_error = result.error
        return True

    async def pick(self, client: httpx.AsyncClient, result: SearchResult) -> ActionState:
        record = self.current
        if record is None:
            return ActionState("error", "No location selected")
        if self.pending:
            return ActionState("error", "An image is already being saved")
        if self.loading:
            return ActionState("error", "Candidates are still loading")

        self.pending = True
        try:
            state = await assign_image(
                client,
                city=record.city,
                country=record.country,
                image_id=result.id,
                image_url=result.best_url,
                store=self.store,
                downloader=self.downloader,
                provider=self.provider,
                journal=self.journal,
            )
        finally:
            self.pending = False

        self.last_action = state
        if state.ok:
            record.filename = state.filename
            self._advance()
        return state
