"""Client for the upstream movie feed."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from ..config import LANGUAGE_PLACEHOLDER, Settings

logger = logging.getLogger(__name__)


class FetchFailure(RuntimeError):
    """Raised when the movie feed cannot deliver a usable payload."""


class MovieFetcher(Protocol):
    async def fetch_current(self, language: str) -> dict[str, Any]: ...

    async def fetch_historic(self, language: str) -> dict[str, Any]: ...


class MovieSourceClient:
    """Thin wrapper around the movie feed HTTP endpoints."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    async def fetch_current(self, language: str) -> dict[str, Any]:
        """Return upcoming and current releases for ``language``."""

        return await self._fetch(self._settings.current_movies_path, language)

    async def fetch_historic(self, language: str) -> dict[str, Any]:
        """Return previously predicted releases for ``language``."""

        return await self._fetch(self._settings.historic_movies_path, language)

    async def _fetch(self, path_template: str, language: str) -> dict[str, Any]:
        normalized_language = (language or "").strip() or self._settings.default_language
        url = path_template.replace(LANGUAGE_PLACEHOLDER, quote(normalized_language, safe=""))

        try:
            response = await self._client.get(url, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Movie feed returned %s for %s",
                exc.response.status_code,
                url,
            )
            raise FetchFailure(f"Movie feed returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Movie feed request failed for %s: %s", url, exc)
            raise FetchFailure(f"Movie feed unavailable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Unexpected non-JSON movie feed response for %s", url)
            raise FetchFailure("Movie feed returned invalid JSON") from exc

        if payload is None:
            return {}
        if not isinstance(payload, dict):
            logger.warning("Unexpected movie feed structure for %s", url)
            raise FetchFailure("Movie feed payload is not an object")
        return payload

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"{self._settings.app_name} (reelscope)",
        }
