"""Utility helpers for the ReelScope service."""

from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime
from typing import Any


NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
PARTIAL_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{1,2}))?$")
GENRE_SPLIT_RE = re.compile(r"[,|/]")

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
)


def slugify(value: str) -> str:
    """Return a URL-friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower() or "movie"


def ensure_unique_id(base_id: str, fallback: str, index: int) -> str:
    """Generate a deterministic record identifier."""

    if base_id:
        return base_id
    return f"{slugify(fallback)}-{index}"


def collation_key(value: str) -> str:
    """Return an accent and case insensitive sort key for display strings."""

    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold()


def coerce_float(value: Any) -> float | None:
    """Convert numbers and numeric-looking strings into finite floats."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().rstrip("%").strip().replace(",", "")
        if not NUMBER_RE.match(text):
            return None
        number = float(text)
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_date(value: Any, *, allow_partial: bool = True) -> date | None:
    """Parse the date formats seen in movie feeds.

    ``allow_partial`` admits bare years and year-month values, which resolve
    to the first day of the period.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    match = PARTIAL_DATE_RE.match(text)
    if match:
        if not allow_partial:
            return None
        try:
            return date(int(match.group(1)), int(match.group(2) or 1), 1)
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def split_genres(value: Any) -> tuple[str, ...]:
    """Return genre names from a list or a delimited string."""

    if value is None:
        return ()
    if isinstance(value, str):
        parts = GENRE_SPLIT_RE.split(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        parts = [part for part in value if isinstance(part, str)]
    else:
        return ()

    genres: list[str] = []
    for part in parts:
        genre = part.strip()
        if genre and genre not in genres:
            genres.append(genre)
    return tuple(genres)
