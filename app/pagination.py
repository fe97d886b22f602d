"""Incremental reveal of a filtered record list."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12

ItemT = TypeVar("ItemT")


class ProximityObserver(Protocol):
    """Capability that reports when a rendered item scrolls into view.

    ``observe`` watches the item that closes a rendered prefix of ``anchor``
    entries and calls ``callback(anchor)`` once it becomes visible.
    ``disconnect`` stops all observation.
    """

    def observe(self, anchor: int, callback: Callable[[int], None]) -> None: ...

    def disconnect(self) -> None: ...


def visible(records: Sequence[ItemT], page_size: int, current_page: int) -> list[ItemT]:
    """Return the revealed prefix for ``current_page``."""

    limit = max(page_size, 0) * max(current_page, 1)
    return list(records[: min(limit, len(records))])


def has_more(records: Sequence[object], visible_count: int) -> bool:
    return visible_count < len(records)


def advance(current_page: int) -> int:
    return current_page + 1


class PaginationController:
    """Tracks how many pages of a result list have been revealed."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.current_page = 1
        self._observer: ProximityObserver | None = None
        self._armed_anchor: int | None = None
        self._released = False
        self._on_advance: Callable[[], object] | None = None
        self._last_visible_count = 0
        self._last_total = 0

    def visible(self, records: Sequence[ItemT]) -> list[ItemT]:
        items = visible(records, self.page_size, self.current_page)
        self._last_visible_count = len(items)
        self._last_total = len(records)
        return items

    def has_more(self, records: Sequence[object]) -> bool:
        return has_more(records, len(visible(records, self.page_size, self.current_page)))

    def advance(self) -> int:
        self.current_page = advance(self.current_page)
        return self.current_page

    def on_criteria_changed(self) -> None:
        """Start over from the first page for a new query."""

        self.current_page = 1
        self._armed_anchor = None
        # Unknown until the next render; pending triggers belong to the old list.
        self._last_visible_count = -1
        if self._observer is not None:
            self._observer.disconnect()

    def on_proximity_trigger(self, anchor: int) -> bool:
        """Reveal one more page when the last rendered item came into view.

        ``anchor`` is the rendered count the view had when the event fired.
        Events for any other count are stale, so a repeated delivery of the
        same event cannot advance twice.
        """

        if self._released:
            return False
        if anchor != self._last_visible_count:
            logger.debug(
                "Ignoring proximity trigger for %s items (showing %s)",
                anchor,
                self._last_visible_count,
            )
            return False
        if self._last_visible_count >= self._last_total:
            return False
        self.advance()
        self._last_visible_count = min(
            self.page_size * self.current_page, self._last_total
        )
        return True

    def _handle_proximity(self, anchor: int) -> None:
        if self.on_proximity_trigger(anchor) and self._on_advance is not None:
            self._on_advance()

    def bind(
        self,
        observer: ProximityObserver,
        *,
        on_advance: Callable[[], object] | None = None,
    ) -> None:
        """Attach the viewport capability used to drive ``on_proximity_trigger``.

        ``on_advance`` runs after an observer-driven advance so the owner can
        re-render and re-arm the observer on the new last item.
        """

        if self._observer is not None and self._observer is not observer:
            self._observer.disconnect()
        self._observer = observer
        self._released = False
        self._on_advance = on_advance
        self._armed_anchor = None

    def render(self, records: Sequence[ItemT], *, is_loading: bool = False) -> list[ItemT]:
        """Return the visible prefix and re-arm the observer on its last item."""

        items = self.visible(records)
        if self._observer is None or self._released:
            return items
        if is_loading or not self.has_more(records):
            if self._armed_anchor is not None:
                self._observer.disconnect()
                self._armed_anchor = None
            return items
        anchor = len(items)
        if anchor != self._armed_anchor:
            self._observer.disconnect()
            self._observer.observe(anchor, self._handle_proximity)
            self._armed_anchor = anchor
        return items

    def release(self) -> None:
        """Detach from the viewport; later callbacks are ignored."""

        self._released = True
        self._armed_anchor = None
        if self._observer is not None:
            self._observer.disconnect()
            self._observer = None
        self._on_advance = None
