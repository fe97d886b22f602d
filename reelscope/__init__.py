"""Import alias exposing the ReelScope FastAPI app under the project name."""

from __future__ import annotations

from app.main import app, create_app

__all__ = ["app", "create_app"]
