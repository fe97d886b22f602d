"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import Settings


def test_defaults_match_the_reference_feed() -> None:
    settings = Settings(_env_file=None)

    assert settings.default_language == "Hindi"
    assert settings.page_size == 12
    assert settings.current_movies_path == "/movies/{language}.json"
    assert settings.log_level == "INFO"


def test_source_paths_are_rooted() -> None:
    """Relative feed paths gain a leading slash."""

    settings = Settings(_env_file=None, CURRENT_MOVIES_PATH="feeds/{language}/latest.json")

    assert settings.current_movies_path == "/feeds/{language}/latest.json"


def test_source_paths_require_language_placeholder() -> None:
    with pytest.raises(ValueError, match="placeholder"):
        Settings(_env_file=None, HISTORIC_MOVIES_PATH="/historic.json")


def test_blank_default_language_is_rejected() -> None:
    with pytest.raises(ValueError, match="DEFAULT_LANGUAGE"):
        Settings(_env_file=None, DEFAULT_LANGUAGE="   ")


def test_log_level_is_case_insensitive() -> None:
    settings = Settings(_env_file=None, LOG_LEVEL="debug")

    assert settings.log_level == "DEBUG"


def test_page_size_bounds() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, PAGE_SIZE=0)


def test_legacy_source_url_alias() -> None:
    settings = Settings(_env_file=None, MOVIE_SOURCE_URL="https://feed.example.com")

    assert str(settings.movie_api_url) == "https://feed.example.com/"
