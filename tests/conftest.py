"""Pytest configuration and test helpers."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from app.services.movie_source import FetchFailure  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


class StubFetcher:
    """In-memory movie feed keyed by language.

    A language mapped to an exception raises it; a language listed in
    ``gates`` waits for the matching event before answering.
    """

    def __init__(
        self,
        current: dict[str, Any] | None = None,
        historic: dict[str, Any] | None = None,
    ) -> None:
        self.current = current or {}
        self.historic = historic or {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, str]] = []

    async def fetch_current(self, language: str) -> dict[str, Any]:
        return await self._answer("current", self.current, language)

    async def fetch_historic(self, language: str) -> dict[str, Any]:
        return await self._answer("historic", self.historic, language)

    async def _answer(
        self, kind: str, table: dict[str, Any], language: str
    ) -> dict[str, Any]:
        self.calls.append((kind, language))
        gate = self.gates.get(language)
        if gate is not None:
            await gate.wait()
        result = table.get(language, {})
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def stub_fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def failing_feed() -> FetchFailure:
    return FetchFailure("Movie feed unavailable: connection refused")


def make_feed(count: int, *, language: str = "Hindi") -> dict[str, dict[str, Any]]:
    """Return a feed payload with ``count`` well-formed records."""

    return {
        f"key-{index:03d}": {
            "FilmCommonName": f"Film {index:03d}",
            "Director": f"Director {index % 5}",
            "classification_s6b3": "UA" if index % 2 else "A",
            "Total_Score_s6b3": str(50 + index),
            "FilmRelDate": f"2023-01-{(index % 28) + 1:02d}",
            "FilmLang": language,
        }
        for index in range(count)
    }


class FakeViewport:
    """Proximity observer driven by the test instead of a rendering surface."""

    def __init__(self) -> None:
        self.anchor: int | None = None
        self.callback: Callable[[int], None] | None = None
        self.disconnects = 0

    def observe(self, anchor: int, callback: Callable[[int], None]) -> None:
        self.anchor = anchor
        self.callback = callback

    def disconnect(self) -> None:
        self.disconnects += 1
        self.anchor = None
        self.callback = None

    def scroll_last_item_into_view(self) -> None:
        assert self.callback is not None and self.anchor is not None
        self.callback(self.anchor)
