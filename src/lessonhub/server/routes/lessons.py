"""Lesson endpoints: search, list, update, delete."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

try:
    from fastapi import APIRouter, Body, Depends, Query, Request
except ImportError:
    raise ImportError("FastAPI is required. Install with: pip install lessonhub")

from lessonhub.exceptions import StoreError
from lessonhub.search import NoMatch, resolve_search
from lessonhub.server.deps import get_store
from lessonhub.server.errors import error_response, map_failure
from lessonhub.server.metrics import search_queries_total
from lessonhub.server.models import MessageResponse
from lessonhub.server.responses import PrettyJSONResponse, encode_documents
from lessonhub.store.base import Store, is_valid_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lessons"])

# Update and delete answer 408 for bad IDs and misses. Clients depend on it.
LESSON_ERROR_STATUS = 408


def _lesson_error(message: str) -> PrettyJSONResponse:
    return PrettyJSONResponse(status_code=LESSON_ERROR_STATUS, content={"error": message})


# ── Search ─────────────────────────────────────────────────────────


@router.get("/search")
async def search_lessons(
    request: Request,
    q: Optional[str] = Query(None),
) -> PrettyJSONResponse:
    """Full-text search over subject and location, with substring fallback.

    The query is checked before the store is looked up.
    """
    if not q:
        return PrettyJSONResponse(status_code=406, content={"error": "Search query is required."})

    store = get_store(request)

    try:
        outcome = await resolve_search(store, q)
    except StoreError as exc:
        return error_response(
            map_failure(exc, "Search failed", message="An error occurred during the search.")
        )

    search_queries_total.inc(stage=outcome.stage)
    if isinstance(outcome, NoMatch):
        return PrettyJSONResponse(status_code=404, content={"error": "No lessons found."})

    return PrettyJSONResponse(
        content=encode_documents(outcome.lessons),
        headers={"X-Search-Stage": outcome.stage},
    )


# ── List ───────────────────────────────────────────────────────────


@router.get("/lessons")
async def list_lessons(store: Store = Depends(get_store)) -> PrettyJSONResponse:
    """Return every lesson."""
    try:
        lessons = await store.list_lessons()
    except StoreError as exc:
        return error_response(map_failure(exc, "Error fetching lessons"))
    return PrettyJSONResponse(content=encode_documents(lessons))


# ── Update ─────────────────────────────────────────────────────────


@router.put("/updateLesson/{lesson_id}", response_model=MessageResponse)
async def update_lesson(
    lesson_id: str,
    request: Request,
    body: Optional[Dict[str, Any]] = Body(None),
):
    """Merge the submitted fields into a lesson.

    ``_id`` is never rewritten; a body holding only ``_id`` counts as empty.
    """
    if not is_valid_id(lesson_id):
        return _lesson_error("Invalid lesson ID.")

    fields = {k: v for k, v in (body or {}).items() if k != "_id"}
    if not fields:
        return _lesson_error("No data provided for update.")

    store = get_store(request)
    try:
        modified = await store.update_lesson(lesson_id, fields)
    except StoreError as exc:
        return error_response(map_failure(exc, "Error updating lesson"))

    if modified == 0:
        return _lesson_error("Lesson not found or no fields changed.")
    logger.info("Lesson %s updated: %s", lesson_id, sorted(fields))
    return MessageResponse(message="Lesson updated successfully")


# ── Delete ─────────────────────────────────────────────────────────


@router.delete("/deleteLesson/{lesson_id}", response_model=MessageResponse)
async def delete_lesson(lesson_id: str, request: Request):
    """Delete a lesson."""
    if not is_valid_id(lesson_id):
        return _lesson_error("Invalid lesson ID.")

    store = get_store(request)
    try:
        deleted = await store.delete_lesson(lesson_id)
    except StoreError as exc:
        return error_response(map_failure(exc, "Error deleting lesson"))

    if deleted == 0:
        return _lesson_error("Lesson not found.")
    logger.info("Lesson %s deleted", lesson_id)
    return MessageResponse(message="Lesson deleted successfully")
