"""HTTP view-binding routes."""

from __future__ import annotations

import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.filter_store import FilterStore
from app.main import PAST_COLLECTION, UPCOMING_COLLECTION, register_routes
from app.services.browser import BrowseSession

from conftest import StubFetcher, make_feed


def build_app(fetcher: StubFetcher) -> tuple[FastAPI, FilterStore]:
    app = FastAPI()
    register_routes(app)
    store = FilterStore()
    sessions = {
        UPCOMING_COLLECTION: BrowseSession(UPCOMING_COLLECTION, fetcher, store),
        PAST_COLLECTION: BrowseSession(PAST_COLLECTION, fetcher, store, historic=True),
    }
    for session in sessions.values():
        asyncio.run(session.load())
    app.state.filter_store = store
    app.state.sessions = sessions
    return app, store


def test_collection_returns_first_page() -> None:
    fetcher = StubFetcher(current={"Hindi": make_feed(25)})
    app, _ = build_app(fetcher)

    with TestClient(app) as client:
        response = client.get("/api/collections/upcoming")

    assert response.status_code == 200
    payload = response.json()
    assert payload["isLoading"] is False
    assert payload["hasMore"] is True
    assert payload["total"] == 25
    assert payload["rendered"] == 12
    first = payload["items"][0]
    assert first["title"] == "Film 000"
    assert first["releaseDate"] == "2023-01-01"
    assert first["score"] == 50.0


def test_more_advances_once_per_rendered_count() -> None:
    fetcher = StubFetcher(current={"Hindi": make_feed(25)})
    app, _ = build_app(fetcher)

    with TestClient(app) as client:
        first = client.post("/api/collections/upcoming/more", params={"rendered": 12})
        repeat = client.post("/api/collections/upcoming/more", params={"rendered": 12})
        last = client.post("/api/collections/upcoming/more", params={"rendered": 24})
        beyond = client.post("/api/collections/upcoming/more", params={"rendered": 25})

    assert first.json()["advanced"] is True
    assert first.json()["rendered"] == 24
    assert repeat.json()["advanced"] is False
    assert last.json()["rendered"] == 25
    assert last.json()["hasMore"] is False
    assert beyond.json()["advanced"] is False
    assert beyond.json()["page"] == 3


def test_put_filters_updates_every_collection() -> None:
    fetcher = StubFetcher(
        current={"Hindi": make_feed(25)},
        historic={
            "Hindi": {
                "x": {"FilmCommonName": "Film 001", "FilmRelDate": "2020-01-01", "classification_s6b3": "UA"},
                "y": {"FilmCommonName": "Film 002", "FilmRelDate": "2020-01-02", "classification_s6b3": "A"},
            }
        },
    )
    app, store = build_app(fetcher)

    with TestClient(app) as client:
        client.post("/api/collections/upcoming/more", params={"rendered": 12})
        response = client.put(
            "/api/filters",
            json={"category": ["ua"], "sortBy": "score-desc", "scoreRange": [60, 70]},
        )
        upcoming = client.get("/api/collections/upcoming").json()
        past = client.get("/api/collections/past").json()
        filters = client.get("/api/filters").json()

    assert response.status_code == 200
    assert response.json()["sortBy"] == "score-desc"
    assert store.get_criteria().category == ("ua",)
    assert upcoming["page"] == 1
    assert [item["score"] for item in upcoming["items"]] == [69.0, 67.0, 65.0, 63.0, 61.0]
    assert [item["title"] for item in past["items"]] == []
    assert filters["scoreRange"] == [60.0, 70.0]


def test_put_filters_rejects_unknown_sort() -> None:
    app, store = build_app(StubFetcher())

    with TestClient(app) as client:
        response = client.put("/api/filters", json={"sortBy": "popularity"})

    assert response.status_code == 400
    assert store.get_criteria().sort_by is None


def test_reload_recovers_after_failure(failing_feed) -> None:
    fetcher = StubFetcher(current={"Hindi": failing_feed})
    app, _ = build_app(fetcher)

    with TestClient(app) as client:
        failed = client.get("/api/collections/upcoming").json()
        fetcher.current["Hindi"] = make_feed(3)
        recovered = client.post("/api/collections/upcoming/reload").json()

    assert failed["items"] == []
    assert failed["isLoading"] is False
    assert failed["error"]
    assert recovered["total"] == 3
    assert recovered["error"] is None


def test_unknown_collection_is_not_found() -> None:
    app, _ = build_app(StubFetcher())

    with TestClient(app) as client:
        response = client.get("/api/collections/archive")

    assert response.status_code == 404


def test_put_filters_rejects_undecodable_body() -> None:
    app, store = build_app(StubFetcher())

    with TestClient(app) as client:
        response = client.put(
            "/api/filters",
            content=b'{"search": "\xff"}',
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 400
    assert store.get_criteria().search is None
