"""Abstract store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

try:
    from bson import ObjectId
except ImportError:
    raise ImportError("pymongo is required. Install with: pip install pymongo")

Document = Dict[str, Any]

# Fields covered by the lessons text index and the substring fallback.
SEARCH_FIELDS = ("subject", "location")


def is_valid_id(value: Any) -> bool:
    """Return True if ``value`` is a structurally valid document identifier.

    Only the format is checked; the referenced document may not exist.
    """
    return isinstance(value, str) and ObjectId.is_valid(value)


def to_json_document(doc: Document) -> Document:
    """Return a copy of ``doc`` with its ``_id`` rendered as a string."""
    out = dict(doc)
    if isinstance(out.get("_id"), ObjectId):
        out["_id"] = str(out["_id"])
    return out


class Store(ABC):
    """Abstract base class for lesson and order storage backends.

    Documents handed back by a store are JSON-ready: ``_id`` is a string.
    """

    @abstractmethod
    async def ensure_indexes(self) -> None:
        """Create the full-text index over the lesson search fields."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the backend is reachable."""

    @abstractmethod
    async def list_lessons(self) -> List[Document]:
        """Return every lesson, in store order."""

    @abstractmethod
    async def text_search(self, query: str) -> List[Document]:
        """Full-text lookup over the indexed lesson fields."""

    @abstractmethod
    async def substring_search(self, query: str) -> List[Document]:
        """Lessons whose search fields contain ``query``, ignoring case."""

    @abstractmethod
    async def get_lesson(self, lesson_id: str) -> Optional[Document]:
        """Get a lesson by ID, or None if not found."""

    @abstractmethod
    async def insert_lesson(self, lesson: Document) -> str:
        """Insert a lesson and return its generated ID."""

    @abstractmethod
    async def update_lesson(self, lesson_id: str, fields: Document) -> int:
        """Merge ``fields`` into a lesson. Returns the number of documents modified."""

    @abstractmethod
    async def delete_lesson(self, lesson_id: str) -> int:
        """Delete a lesson by ID. Returns the number of documents deleted."""

    @abstractmethod
    async def insert_order(self, order: Document) -> str:
        """Insert an order and return its generated ID."""

    @abstractmethod
    async def get_order(self, order_id: str) -> Optional[Document]:
        """Get an order by ID, or None if not found."""

    async def close(self) -> None:
        """Release backend resources."""
