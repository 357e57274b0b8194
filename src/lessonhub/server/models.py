"""Pydantic request/response models for the lessonhub server."""

from __future__ import annotations

from datetime import datetime
from typing import Any

try:
    from pydantic import BaseModel
except ImportError:
    raise ImportError("Pydantic is required. Install with: pip install lessonhub")


# ── Orders ─────────────────────────────────────────────────────────


class OrderCreateRequest(BaseModel):
    """Request body for POST /order.

    ``orderInfo`` is free-form. ``lessonId`` is left untyped so the handler
    can answer a missing, non-list or malformed value with 400, not 422.
    """

    orderInfo: Any = None
    lessonId: Any = None


class OrderCreateResponse(BaseModel):
    """Response for POST /order."""

    message: str
    insertedId: str


# ── Generic ────────────────────────────────────────────────────────


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: datetime
