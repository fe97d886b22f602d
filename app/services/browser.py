"""Browse sessions binding the filter store to a fetched movie collection."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Sequence

from ..filter_store import FilterStore
from ..models import FilterCriteria, MovieDetails
from ..normalizer import normalize, normalize_historic
from ..pagination import DEFAULT_PAGE_SIZE, PaginationController, ProximityObserver
from ..query import apply
from .movie_source import FetchFailure, MovieFetcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BrowseView:
    """Everything the list renderer needs for one paint."""

    items: list[MovieDetails]
    is_loading: bool
    has_more: bool
    total: int
    page: int
    language: str
    error: str | None = None
    criteria: FilterCriteria = field(default_factory=FilterCriteria)

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [item.to_payload() for item in self.items],
            "isLoading": self.is_loading,
            "hasMore": self.has_more,
            "total": self.total,
            "page": self.page,
            "rendered": len(self.items),
            "language": self.language,
            "error": self.error,
            "filters": self.criteria.to_payload(),
        }


class BrowseSession:
    """Keeps one collection's records, query results and reveal state current.

    Criteria changes reset pagination and re-derive the result list; a change
    to the fetch language also starts a new load. Each load carries a request
    token and only the most recently issued token may publish its records.
    """

    def __init__(
        self,
        name: str,
        fetcher: MovieFetcher,
        store: FilterStore,
        *,
        historic: bool = False,
        default_language: str = "Hindi",
        page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.name = name
        self._fetcher = fetcher
        self._store = store
        self._historic = historic
        self._default_language = default_language
        self._clock = clock or datetime.now
        self.pagination = PaginationController(page_size)

        self._criteria = store.get_criteria()
        self._language = self._criteria.fetch_language(default_language)
        self._records: list[MovieDetails] = []
        self._filtered: list[MovieDetails] = []
        self._is_loading = True
        self._request_token = 0
        self._load_task: asyncio.Task[bool] | None = None
        self.last_error: str | None = None
        self._unsubscribe: Callable[[], None] | None = store.subscribe(
            self._on_criteria_changed
        )

    @property
    def language(self) -> str:
        return self._language

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def records(self) -> Sequence[MovieDetails]:
        return tuple(self._records)

    @property
    def filtered(self) -> Sequence[MovieDetails]:
        return tuple(self._filtered)

    def _on_criteria_changed(self, criteria: FilterCriteria) -> None:
        self._criteria = criteria
        self.pagination.on_criteria_changed()
        self._refilter()
        language = criteria.fetch_language(self._default_language)
        if language != self._language:
            self._language = language
            self.schedule_load()

    def _refilter(self) -> None:
        self._filtered = apply(self._records, self._criteria)
        self._render()

    def _render(self) -> list[MovieDetails]:
        return self.pagination.render(self._filtered, is_loading=self._is_loading)

    def schedule_load(self) -> asyncio.Task[bool] | None:
        """Start a load in the background on the running event loop."""

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; %s load must be awaited explicitly", self.name)
            self._is_loading = True
            return None
        self._load_task = loop.create_task(self.load())
        return self._load_task

    async def wait_for_load(self) -> None:
        """Block until the most recently scheduled load has finished."""

        while self._load_task is not None and not self._load_task.done():
            await self._load_task

    async def load(self) -> bool:
        """Fetch, normalize and publish the collection for the current language.

        Returns ``False`` when a newer request superseded this one.
        """

        self._request_token += 1
        token = self._request_token
        language = self._language
        self._is_loading = True
        logger.info("Loading %s movies for %s (request %s)", self.name, language, token)

        try:
            if self._historic:
                payload = await self._fetcher.fetch_historic(language)
            else:
                payload = await self._fetcher.fetch_current(language)
        except FetchFailure as exc:
            if token != self._request_token:
                logger.debug("Ignoring failed stale %s request %s", self.name, token)
                return False
            logger.warning("Failed to load %s movies for %s: %s", self.name, language, exc)
            self._publish([], error=str(exc))
            return True
        except Exception as exc:
            if token != self._request_token:
                logger.debug("Ignoring failed stale %s request %s", self.name, token)
                return False
            logger.exception("Unexpected error loading %s movies for %s", self.name, language)
            self._publish([], error=str(exc) or exc.__class__.__name__)
            return True

        if token != self._request_token:
            logger.debug("Discarding stale %s response for request %s", self.name, token)
            return False

        records: list[MovieDetails]
        if self._historic:
            records = list(normalize_historic(payload, now=self._clock()))
        else:
            records = normalize(payload)
        self._publish(records, error=None)
        logger.info("Loaded %s %s movies for %s", len(records), self.name, language)
        return True

    async def reload(self) -> bool:
        """Retry the current fetch without touching criteria or pagination."""

        return await self.load()

    def _publish(self, records: list[MovieDetails], *, error: str | None) -> None:
        self._records = records
        self.last_error = error
        self._is_loading = False
        self._refilter()

    def view(self) -> BrowseView:
        items = self._render()
        return BrowseView(
            items=items,
            is_loading=self._is_loading,
            has_more=self.pagination.has_more(self._filtered),
            total=len(self._filtered),
            page=self.pagination.current_page,
            language=self._language,
            error=self.last_error,
            criteria=self._criteria,
        )

    def trigger_proximity(self, anchor: int) -> bool:
        """Handle the view reporting that item ``anchor`` scrolled into view."""

        advanced = self.pagination.on_proximity_trigger(anchor)
        if advanced:
            self._render()
        return advanced

    def attach_viewport(self, observer: ProximityObserver) -> None:
        self.pagination.bind(observer, on_advance=self._render)
        self._render()

    async def close(self) -> None:
        """Detach from the store and viewport and drop any in-flight load."""

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.pagination.release()
        task = self._load_task
        self._load_task = None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
