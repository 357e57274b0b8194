"""Shared fixtures: in-memory store seeded with lessons, and a store that always fails."""

from __future__ import annotations

from typing import List, Tuple

import pytest
import pytest_asyncio

from lessonhub.exceptions import StoreError
from lessonhub.store.memory import MemoryStore

LESSONS: List[dict] = [
    {"subject": "Mathematics", "location": "London", "price": 100, "spaces": 5},
    {"subject": "English", "location": "Oxford", "price": 80, "spaces": 5},
    {"subject": "Music", "location": "Bristol", "price": 90, "spaces": 5},
]


class FailingStore(MemoryStore):
    """MemoryStore whose data operations all raise StoreError."""

    def _fail(self, operation: str):
        raise StoreError(f"{operation} failed: connection refused")

    async def list_lessons(self):
        self._fail("list lessons")

    async def text_search(self, query):
        self._fail("text search")

    async def substring_search(self, query):
        self._fail("substring search")

    async def update_lesson(self, lesson_id, fields):
        self._fail("update lesson")

    async def delete_lesson(self, lesson_id):
        self._fail("delete lesson")

    async def insert_order(self, order):
        self._fail("insert order")

    async def ping(self):
        return False


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest_asyncio.fixture
async def seeded_store(memory_store: MemoryStore) -> Tuple[MemoryStore, List[str]]:
    """MemoryStore holding LESSONS; returns (store, ids in LESSONS order)."""
    ids = [await memory_store.insert_lesson(doc) for doc in LESSONS]
    return memory_store, ids
