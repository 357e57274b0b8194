"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

from pathlib import Path

from fastapi import Request

from lessonhub.exceptions import StoreNotConfiguredError
from lessonhub.store.base import Store


def get_store(request: Request) -> Store:
    """Return the store attached to the running app."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreNotConfiguredError()
    return store


def get_images_dir(request: Request) -> Path:
    return Path(request.app.state.images_dir).resolve()
