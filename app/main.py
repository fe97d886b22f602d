"""Entry point for the FastAPI-powered movie browser."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import settings
from .filter_store import FilterStore, get_filter_store
from .services.browser import BrowseSession
from .services.movie_source import MovieSourceClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

UPCOMING_COLLECTION = "upcoming"
PAST_COLLECTION = "past"

app: FastAPI


def build_sessions(
    source: MovieSourceClient, store: FilterStore
) -> dict[str, BrowseSession]:
    """Create the upcoming and past browse sessions sharing one filter store."""

    return {
        UPCOMING_COLLECTION: BrowseSession(
            UPCOMING_COLLECTION,
            source,
            store,
            default_language=settings.default_language,
            page_size=settings.page_size,
        ),
        PAST_COLLECTION: BrowseSession(
            PAST_COLLECTION,
            source,
            store,
            historic=True,
            default_language=settings.default_language,
            page_size=settings.page_size,
        ),
    }


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.movie_api_url),
            timeout=httpx.Timeout(20.0, connect=10.0),
        )
    )
    store = get_filter_store()
    sessions = build_sessions(MovieSourceClient(settings, http_client), store)

    fastapi_app.state.filter_store = store
    fastapi_app.state.sessions = sessions
    for session in sessions.values():
        session.schedule_load()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        for session in sessions.values():
            await session.close()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Filter, sort and incrementally browse movie predictions",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_filter_store_state(app: FastAPI) -> FilterStore:
    store = getattr(app.state, "filter_store", None)
    if not isinstance(store, FilterStore):
        raise RuntimeError("Filter store not initialised")
    return store


def get_session(app: FastAPI, name: str) -> BrowseSession:
    sessions = getattr(app.state, "sessions", None)
    if not isinstance(sessions, dict):
        raise RuntimeError("Browse sessions not initialised")
    session = sessions.get(name)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection {name}")
    return session


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/filters")
    async def read_filters() -> dict[str, Any]:
        store = get_filter_store_state(fastapi_app)
        return store.get_criteria().to_payload()

    @fastapi_app.put("/api/filters")
    async def replace_filters(request: Request) -> dict[str, Any]:
        store = get_filter_store_state(fastapi_app)
        try:
            payload = await request.json()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid JSON body") from exc
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload")
        try:
            criteria = store.set_criteria(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=400, detail=exc.errors(include_url=False, include_context=False)
            ) from exc
        return criteria.to_payload()

    @fastapi_app.get("/api/collections/{name}")
    async def read_collection(name: str) -> dict[str, Any]:
        session = get_session(fastapi_app, name)
        return session.view().to_payload()

    @fastapi_app.post("/api/collections/{name}/more")
    async def load_more(
        name: str, rendered: int = Query(ge=0)
    ) -> dict[str, Any]:
        session = get_session(fastapi_app, name)
        advanced = session.trigger_proximity(rendered)
        payload = session.view().to_payload()
        payload["advanced"] = advanced
        return payload

    @fastapi_app.post("/api/collections/{name}/reload")
    async def reload_collection(name: str) -> dict[str, Any]:
        session = get_session(fastapi_app, name)
        await session.reload()
        return session.view().to_payload()


app = create_app()
