from datetime import date, datetime

from app.utils import (
    coerce_float,
    collation_key,
    ensure_unique_id,
    parse_date,
    slugify,
    split_genres,
)


def test_slugify_basic():
    assert slugify("Kabhi Khushi Kabhie Gham...") == "kabhi-khushi-kabhie-gham"


def test_ensure_unique_id_with_fallback():
    assert ensure_unique_id("tt123", "Ignored", 0) == "tt123"
    assert ensure_unique_id("", "Rocky Aur Rani", 3) == "rocky-aur-rani-3"


def test_coerce_float_accepts_numeric_strings():
    assert coerce_float(" 7.5 ") == 7.5
    assert coerce_float("92%") == 92.0
    assert coerce_float("1,200") == 1200.0
    assert coerce_float(8) == 8.0
    assert coerce_float("eight") is None
    assert coerce_float(False) is None


def test_parse_date_formats():
    assert parse_date("2023-09-07") == date(2023, 9, 7)
    assert parse_date("07-09-2023") == date(2023, 9, 7)
    assert parse_date("7 Sep 2023") == date(2023, 9, 7)
    assert parse_date("September 7, 2023") == date(2023, 9, 7)
    assert parse_date(datetime(2023, 9, 7, 18, 0)) == date(2023, 9, 7)
    assert parse_date("2023-09") == date(2023, 9, 1)
    assert parse_date("2023-09", allow_partial=False) is None
    assert parse_date(20230907) is None


def test_split_genres_dedupes():
    assert split_genres("Action, Drama / Action") == ("Action", "Drama")
    assert split_genres(["Comedy", 3, " Romance "]) == ("Comedy", "Romance")
    assert split_genres(None) == ()


def test_collation_key_folds_accents_and_case():
    assert collation_key("Élan") == collation_key("elan")
