"""Pydantic models describing movie records and browse queries."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable, Literal, get_args

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

SortKey = Literal[
    "score-desc",
    "score-asc",
    "date-asc",
    "date-desc",
    "title-asc",
    "title-desc",
]

SORT_KEYS: tuple[str, ...] = get_args(SortKey)


class MovieDetails(BaseModel):
    """Canonical movie record shared by every downstream stage."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    director: str | None = None
    classification: str | None = None
    score: float | None = None
    release_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("release_date", "releaseDate"),
        serialization_alias="releaseDate",
    )
    language: str | None = None
    genres: tuple[str, ...] = ()

    @property
    def has_score(self) -> bool:
        return self.score is not None and math.isfinite(self.score)

    @property
    def has_release_date(self) -> bool:
        return self.release_date is not None

    def is_released(self, now: datetime | date | None = None) -> bool:
        """Return whether the release date is known and not after ``now``."""

        if self.release_date is None:
            return False
        reference = now or datetime.now()
        if isinstance(reference, datetime):
            reference = reference.date()
        return self.release_date <= reference

    def to_payload(self) -> dict[str, object]:
        """Return the JSON shape handed to the list renderer."""

        return self.model_dump(mode="json", by_alias=True)


class HistoricMovieDetails(MovieDetails):
    """Movie record sourced from the historic feed."""


def _unique_strings(value: object, field_name: str) -> tuple[str, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        raw_values: Iterable[object] = value.split(",")
    elif isinstance(value, Iterable):
        raw_values = value
    else:
        raise ValueError(f"{field_name} must be a string or iterable of strings")

    cleaned: list[str] = []
    for entry in raw_values:
        text = str(entry).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return tuple(cleaned)


class FilterCriteria(BaseModel):
    """Immutable snapshot of the user's current filter and sort request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    search: str | None = None
    category: tuple[str, ...] = ()
    score_range: tuple[float, float] | None = Field(
        default=None,
        validation_alias=AliasChoices("score_range", "scoreRange"),
        serialization_alias="scoreRange",
    )
    language: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    sort_by: SortKey | None = Field(
        default=None,
        validation_alias=AliasChoices("sort_by", "sortBy"),
        serialization_alias="sortBy",
    )

    @field_validator("search", mode="before")
    @classmethod
    def _strip_search(cls, value: object) -> object:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("category", "language", "genres", mode="before")
    @classmethod
    def _parse_string_set(cls, value: object, info: ValidationInfo) -> tuple[str, ...]:
        return _unique_strings(value, info.field_name)

    @field_validator("score_range", mode="before")
    @classmethod
    def _parse_score_range(cls, value: object) -> object:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",")]
            if len(parts) != 2:
                raise ValueError("scoreRange must contain exactly two bounds")
            return tuple(parts)
        if isinstance(value, (list, tuple)) and any(bound is None for bound in value):
            return None
        return value

    @field_validator("sort_by", mode="before")
    @classmethod
    def _blank_sort(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def fetch_language(self, default: str) -> str:
        """Return the language key used to pick the source feed."""

        return self.language[0] if self.language else default

    def valid_score_range(self) -> tuple[float, float] | None:
        """Return the score bounds when they form a usable inclusive range."""

        if self.score_range is None:
            return None
        low, high = self.score_range
        if not (math.isfinite(low) and math.isfinite(high)):
            return None
        if low > high:
            return None
        return low, high

    def is_empty(self) -> bool:
        return not (
            self.search
            or self.category
            or self.valid_score_range()
            or self.language
            or self.genres
            or self.sort_by
        )

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
