"""ReelScope movie browser package."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, str] = {
    "app": "app.main",
    "create_app": "app.main",
    "FilterCriteria": "app.models",
    "MovieDetails": "app.models",
    "HistoricMovieDetails": "app.models",
    "FilterStore": "app.filter_store",
    "PaginationController": "app.pagination",
    "apply": "app.query",
    "normalize": "app.normalizer",
}

__all__ = list(_EXPORTS)


def __getattr__(name: str) -> Any:
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'app' has no attribute {name}")
    return getattr(import_module(module_name), name)
