"""In-memory store implementation for testing."""

from __future__ import annotations

import copy
import re
from typing import Dict, List, Optional, Set

from bson import ObjectId

from lessonhub.store.base import SEARCH_FIELDS, Document, Store

_WORD = re.compile(r"\w+")


def _words(value: object) -> Set[str]:
    return set(_WORD.findall(str(value).lower())) if value is not None else set()


class MemoryStore(Store):
    """In-memory store backed by dicts. Useful for testing.

    Full-text search matches whole words only (any query word against the
    words of ``subject`` or ``location``), with no stemming. That is close
    enough to the MongoDB text index for "math" not to hit "Mathematics".
    """

    def __init__(self) -> None:
        self._lessons: Dict[str, Document] = {}
        self._orders: Dict[str, Document] = {}
        self.indexed = False

    async def ensure_indexes(self) -> None:
        self.indexed = True

    async def ping(self) -> bool:
        return True

    async def list_lessons(self) -> List[Document]:
        return [copy.deepcopy(doc) for doc in self._lessons.values()]

    async def text_search(self, query: str) -> List[Document]:
        terms = _words(query)
        if not terms:
            return []
        return [
            copy.deepcopy(doc)
            for doc in self._lessons.values()
            if any(terms & _words(doc.get(f)) for f in SEARCH_FIELDS)
        ]

    async def substring_search(self, query: str) -> List[Document]:
        needle = query.lower()
        return [
            copy.deepcopy(doc)
            for doc in self._lessons.values()
            if any(
                isinstance(doc.get(f), str) and needle in doc[f].lower()
                for f in SEARCH_FIELDS
            )
        ]

    async def get_lesson(self, lesson_id: str) -> Optional[Document]:
        doc = self._lessons.get(lesson_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert_lesson(self, lesson: Document) -> str:
        lesson_id = str(lesson.get("_id") or ObjectId())
        self._lessons[lesson_id] = {**copy.deepcopy(lesson), "_id": lesson_id}
        return lesson_id

    async def update_lesson(self, lesson_id: str, fields: Document) -> int:
        doc = self._lessons.get(lesson_id)
        if doc is None:
            return 0
        changed = {k: v for k, v in fields.items() if k not in doc or doc[k] != v}
        if not changed:
            return 0
        doc.update(copy.deepcopy(changed))
        return 1

    async def delete_lesson(self, lesson_id: str) -> int:
        return 1 if self._lessons.pop(lesson_id, None) is not None else 0

    async def insert_order(self, order: Document) -> str:
        order_id = str(ObjectId())
        self._orders[order_id] = {**copy.deepcopy(order), "_id": order_id}
        return order_id

    async def get_order(self, order_id: str) -> Optional[Document]:
        doc = self._orders.get(order_id)
        return copy.deepcopy(doc) if doc is not None else None
