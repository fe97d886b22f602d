"""Convert loosely shaped source records into canonical movie models."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from .models import HistoricMovieDetails, MovieDetails
from .utils import coerce_float, ensure_unique_id, parse_date, split_genres

logger = logging.getLogger(__name__)

# Earliest year a strict feed may report; older values are data-entry noise.
EARLIEST_RELEASE_YEAR = 1888

FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "id": ("id", "_id", "FilmId", "FilmID", "film_id", "movieId", "movie_id"),
    "title": ("FilmCommonName", "title", "Title", "name", "FilmName", "film_name"),
    "director": ("Director", "director", "FilmDirector", "directors"),
    "classification": (
        "classification_s6b3",
        "classification",
        "Classification",
        "category",
        "certification",
    ),
    "score": ("Total_Score_s6b3", "total_score", "TotalScore", "score", "Score"),
    "release_date": (
        "FilmRelDate",
        "releaseDate",
        "release_date",
        "ReleaseDate",
        "released",
    ),
    "language": ("FilmLang", "language", "Language", "lang"),
    "genres": ("genres", "Genres", "genre", "FilmGenre"),
}

ModelT = TypeVar("ModelT", bound=MovieDetails)


class MalformedField(ValueError):
    """Raised when a present field cannot be coerced to its canonical type."""


class EmptyRecord(ValueError):
    """Raised when a record lacks the fields every movie must carry."""


def _lookup(raw: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_KEYS[field]:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(raw: Mapping[str, Any], field: str) -> str | None:
    value = _lookup(raw, field)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        names = [str(entry).strip() for entry in value if str(entry).strip()]
        return ", ".join(names) or None
    if isinstance(value, (dict, bool)):
        raise MalformedField(f"{field} is not textual: {value!r}")
    return str(value).strip() or None


def _score(raw: Mapping[str, Any]) -> float | None:
    value = _lookup(raw, "score")
    if value is None:
        return None
    score = coerce_float(value)
    if score is None:
        raise MalformedField(f"score is not a finite number: {value!r}")
    return score


def _release_date(raw: Mapping[str, Any], *, strict: bool) -> date | None:
    value = _lookup(raw, "release_date")
    if value is None:
        return None
    parsed = parse_date(value, allow_partial=not strict)
    if parsed is None:
        raise MalformedField(f"release date is not a date: {value!r}")
    if strict and parsed.year < EARLIEST_RELEASE_YEAR:
        raise MalformedField(f"release date predates cinema: {value!r}")
    return parsed


def _build(
    model: type[ModelT],
    raw: Any,
    *,
    source_key: str,
    index: int,
    strict: bool,
) -> ModelT:
    if not isinstance(raw, Mapping):
        raise EmptyRecord(f"entry {index} is not a record")

    try:
        title = _text(raw, "title")
    except MalformedField as exc:
        raise EmptyRecord(str(exc)) from exc
    if not title:
        raise EmptyRecord(f"entry {index} has no title")

    raw_id = _lookup(raw, "id")
    base_id = str(raw_id).strip() if raw_id is not None else source_key
    fields: dict[str, Any] = {
        "id": ensure_unique_id(base_id, title, index),
        "title": title,
    }

    extractors = {
        "director": lambda: _text(raw, "director"),
        "classification": lambda: _text(raw, "classification"),
        "score": lambda: _score(raw),
        "release_date": lambda: _release_date(raw, strict=strict),
        "language": lambda: _text(raw, "language"),
    }
    for field, extract in extractors.items():
        try:
            fields[field] = extract()
        except MalformedField as exc:
            logger.debug("Record %s: dropping field %s (%s)", fields["id"], field, exc)
            fields[field] = None

    fields["genres"] = split_genres(_lookup(raw, "genres"))
    return model(**fields)


def _normalize_into(
    model: type[ModelT],
    raw_records: Iterable[Any] | Mapping[str, Any],
    *,
    strict: bool,
) -> list[ModelT]:
    if isinstance(raw_records, Mapping):
        entries: Iterable[tuple[str, Any]] = (
            (str(key), value) for key, value in raw_records.items()
        )
    elif isinstance(raw_records, (str, bytes)) or not isinstance(raw_records, Iterable):
        raise TypeError(
            f"Expected a sequence or mapping of records, got {type(raw_records).__name__}"
        )
    else:
        entries = (("", value) for value in raw_records)

    records: list[ModelT] = []
    dropped = 0
    for index, (source_key, raw) in enumerate(entries):
        try:
            records.append(
                _build(model, raw, source_key=source_key, index=index, strict=strict)
            )
        except EmptyRecord as exc:
            dropped += 1
            logger.debug("Dropping unusable record: %s", exc)

    if dropped:
        logger.debug("Normalized %s records, dropped %s", len(records), dropped)
    return records


def normalize(
    raw_records: Iterable[Any] | Mapping[str, Any], strict: bool = False
) -> list[MovieDetails]:
    """Return canonical records for every usable entry in ``raw_records``.

    A mapping is treated as the fetch payload shape, so its keys serve as
    fallback identifiers. Entries without a title are dropped; any other
    field that fails to parse is left empty on the record. ``strict`` is
    meant for historic feeds and rejects partial or implausible dates.
    """

    return _normalize_into(MovieDetails, raw_records, strict=strict)


def select_past(
    records: Sequence[ModelT], now: datetime | date | None = None
) -> list[ModelT]:
    """Return records released on or before ``now``."""

    reference = now or datetime.now()
    return [record for record in records if record.is_released(reference)]


def normalize_historic(
    raw_records: Iterable[Any] | Mapping[str, Any],
    now: datetime | date | None = None,
) -> list[HistoricMovieDetails]:
    """Build the past set from a historic feed."""

    records = _normalize_into(HistoricMovieDetails, raw_records, strict=True)
    return select_past(records, now)
