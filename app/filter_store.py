"""Holder for the current filter criteria with synchronous change fan-out."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Mapping

from .models import FilterCriteria

logger = logging.getLogger(__name__)

Listener = Callable[[FilterCriteria], None]


class FilterStore:
    """Owns the active :class:`FilterCriteria` and its subscribers.

    Every ``set_criteria`` call replaces the snapshot wholesale and notifies
    each listener in subscription order before returning. A listener that
    sets new criteria while being notified starts a fresh round of its own.
    """

    def __init__(self, initial: FilterCriteria | None = None) -> None:
        self._criteria = initial or FilterCriteria()
        self._listeners: list[Listener] = []

    def get_criteria(self) -> FilterCriteria:
        return self._criteria

    def set_criteria(self, criteria: FilterCriteria | Mapping[str, Any]) -> FilterCriteria:
        """Replace the current criteria and notify subscribers."""

        if not isinstance(criteria, FilterCriteria):
            criteria = FilterCriteria.model_validate(dict(criteria))
        self._criteria = criteria
        logger.debug("Filter criteria changed: %s", criteria.to_payload())
        for listener in list(self._listeners):
            listener(criteria)
        return criteria

    def update(self, **changes: Any) -> FilterCriteria:
        """Derive a new snapshot from the current one and publish it."""

        partial = FilterCriteria.model_validate(changes)
        updates = {name: getattr(partial, name) for name in partial.model_fields_set}
        return self.set_criteria(self._criteria.model_copy(update=updates))

    def reset(self) -> FilterCriteria:
        return self.set_criteria(FilterCriteria())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)


@lru_cache
def get_filter_store() -> FilterStore:
    """Return the process-wide filter store."""

    return FilterStore()
