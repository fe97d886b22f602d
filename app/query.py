"""Filter and sort movie records against a :class:`FilterCriteria`."""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from .models import FilterCriteria, MovieDetails
from .utils import collation_key

RecordT = TypeVar("RecordT", bound=MovieDetails)
Predicate = Callable[[MovieDetails], bool]


def _search_predicate(criteria: FilterCriteria) -> Predicate | None:
    if not criteria.search:
        return None
    needle = criteria.search.lower()

    def predicate(record: MovieDetails) -> bool:
        if needle in record.title.lower():
            return True
        return bool(record.director) and needle in record.director.lower()

    return predicate


def _category_predicate(criteria: FilterCriteria) -> Predicate | None:
    if not criteria.category:
        return None
    wanted = {category.lower() for category in criteria.category}

    def predicate(record: MovieDetails) -> bool:
        return bool(record.classification) and record.classification.lower() in wanted

    return predicate


def _score_predicate(criteria: FilterCriteria) -> Predicate | None:
    bounds = criteria.valid_score_range()
    if bounds is None:
        return None
    low, high = bounds

    def predicate(record: MovieDetails) -> bool:
        return record.has_score and low <= record.score <= high

    return predicate


def _language_predicate(criteria: FilterCriteria) -> Predicate | None:
    if not criteria.language:
        return None
    wanted = {language.lower() for language in criteria.language}

    def predicate(record: MovieDetails) -> bool:
        return bool(record.language) and record.language.lower() in wanted

    return predicate


def _genre_predicate(criteria: FilterCriteria) -> Predicate | None:
    if not criteria.genres:
        return None
    wanted = {genre.lower() for genre in criteria.genres}

    def predicate(record: MovieDetails) -> bool:
        return any(genre.lower() in wanted for genre in record.genres)

    return predicate


FILTER_STAGES: tuple[Callable[[FilterCriteria], Predicate | None], ...] = (
    _search_predicate,
    _category_predicate,
    _score_predicate,
    _language_predicate,
    _genre_predicate,
)


def _active_predicates(criteria: FilterCriteria) -> list[Predicate]:
    predicates = []
    for stage in FILTER_STAGES:
        predicate = stage(criteria)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def matches(record: MovieDetails, criteria: FilterCriteria) -> bool:
    """Return whether a single record passes every active filter."""

    return all(predicate(record) for predicate in _active_predicates(criteria))


def sort_records(
    records: Sequence[RecordT], sort_by: str | None
) -> list[RecordT]:
    """Return ``records`` in the order selected by ``sort_by``.

    Unscored records lead in both score orders and undated records trail in
    both date orders. Every order is stable.
    """

    if sort_by == "score-asc":
        return sorted(
            records,
            key=lambda record: (record.has_score, record.score if record.has_score else 0.0),
        )
    if sort_by == "score-desc":
        return sorted(
            records,
            key=lambda record: (record.has_score, -record.score if record.has_score else 0.0),
        )
    if sort_by == "date-asc":
        return sorted(
            records,
            key=lambda record: (
                not record.has_release_date,
                record.release_date.toordinal() if record.release_date else 0,
            ),
        )
    if sort_by == "date-desc":
        return sorted(
            records,
            key=lambda record: (
                not record.has_release_date,
                -record.release_date.toordinal() if record.release_date else 0,
            ),
        )
    if sort_by == "title-asc":
        return sorted(records, key=lambda record: (collation_key(record.title), record.title))
    if sort_by == "title-desc":
        return sorted(
            records,
            key=lambda record: (collation_key(record.title), record.title),
            reverse=True,
        )
    return list(records)


def apply(records: Sequence[RecordT], criteria: FilterCriteria) -> list[RecordT]:
    """Return the records matching ``criteria`` in the requested order."""

    result = list(records)
    for predicate in _active_predicates(criteria):
        result = [record for record in result if predicate(record)]
        if not result:
            break
    return sort_records(result, criteria.sort_by)
