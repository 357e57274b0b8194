"""Tests for MemoryStore and MongoStore (driver mocked)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from lessonhub.exceptions import StoreError
from lessonhub.store.base import is_valid_id, to_json_document
from lessonhub.store.memory import MemoryStore
from lessonhub.store.mongo import MongoStore


# ── Identifier helpers ─────────────────────────────────────────────


class TestIdentifiers:
    def test_valid_object_id(self):
        assert is_valid_id(str(ObjectId()))

    @pytest.mark.parametrize("value", ["", "abc", "zz" * 12, None, 123, ["x"]])
    def test_invalid_ids(self, value):
        assert not is_valid_id(value)

    def test_to_json_document_stringifies_id(self):
        oid = ObjectId()
        doc = to_json_document({"_id": oid, "subject": "Art"})
        assert doc == {"_id": str(oid), "subject": "Art"}


# ── MemoryStore ────────────────────────────────────────────────────


class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_insert_and_list(self, seeded_store):
        store, ids = seeded_store
        lessons = await store.list_lessons()
        assert [l["_id"] for l in lessons] == ids
        assert all(is_valid_id(i) for i in ids)

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, seeded_store):
        store, ids = seeded_store
        assert await store.update_lesson(ids[0], {"spaces": 4}) == 1
        lesson = await store.get_lesson(ids[0])
        assert lesson["spaces"] == 4
        assert lesson["subject"] == "Mathematics"

    @pytest.mark.asyncio
    async def test_update_same_values_modifies_nothing(self, seeded_store):
        store, ids = seeded_store
        assert await store.update_lesson(ids[0], {"spaces": 5}) == 0

    @pytest.mark.asyncio
    async def test_update_missing(self, memory_store):
        assert await memory_store.update_lesson(str(ObjectId()), {"spaces": 1}) == 0

    @pytest.mark.asyncio
    async def test_delete(self, seeded_store):
        store, ids = seeded_store
        assert await store.delete_lesson(ids[1]) == 1
        assert await store.delete_lesson(ids[1]) == 0
        assert await store.get_lesson(ids[1]) is None

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self, seeded_store):
        store, ids = seeded_store
        lesson = await store.get_lesson(ids[0])
        lesson["subject"] = "changed"
        assert (await store.get_lesson(ids[0]))["subject"] == "Mathematics"

    @pytest.mark.asyncio
    async def test_orders_round_trip(self, memory_store):
        lesson_ids = [str(ObjectId())]
        order_id = await memory_store.insert_order(
            {"orderInfo": {"name": "Ann"}, "lessonId": lesson_ids}
        )
        order = await memory_store.get_order(order_id)
        assert order == {"_id": order_id, "orderInfo": {"name": "Ann"}, "lessonId": lesson_ids}

    @pytest.mark.asyncio
    async def test_text_search_needs_whole_words(self, seeded_store):
        store, _ = seeded_store
        assert await store.text_search("math") == []
        assert len(await store.text_search("music london")) == 2

    @pytest.mark.asyncio
    async def test_ensure_indexes(self, memory_store):
        await memory_store.ensure_indexes()
        assert memory_store.indexed


# ── MongoStore ─────────────────────────────────────────────────────


def _cursor(docs):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def mongo():
    """MongoStore over a mocked client; returns (store, lessons, orders, client)."""
    lessons = MagicMock()
    orders = MagicMock()
    db = MagicMock()
    db.__getitem__.side_effect = lambda name: {"lessons": lessons, "order": orders}[name]
    client = MagicMock()
    client.__getitem__.return_value = db
    client.close = AsyncMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    return MongoStore(db_name="afterschool", client=client), lessons, orders, client


class TestMongoStore:
    def test_requires_uri_or_client(self):
        with pytest.raises(ValueError):
            MongoStore()

    @pytest.mark.asyncio
    async def test_ensure_indexes_creates_text_index(self, mongo):
        store, lessons, _, _ = mongo
        lessons.create_index = AsyncMock(return_value="subject_text_location_text")
        await store.ensure_indexes()
        lessons.create_index.assert_awaited_once_with(
            [("subject", "text"), ("location", "text")]
        )

    @pytest.mark.asyncio
    async def test_list_stringifies_ids(self, mongo):
        store, lessons, _, _ = mongo
        oid = ObjectId()
        lessons.find.return_value = _cursor([{"_id": oid, "subject": "Art"}])
        assert await store.list_lessons() == [{"_id": str(oid), "subject": "Art"}]
        lessons.find.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_text_search_query(self, mongo):
        store, lessons, _, _ = mongo
        lessons.find.return_value = _cursor([])
        await store.text_search("math")
        lessons.find.assert_called_once_with({"$text": {"$search": "math"}})

    @pytest.mark.asyncio
    async def test_substring_search_escapes_pattern(self, mongo):
        store, lessons, _, _ = mongo
        lessons.find.return_value = _cursor([])
        await store.substring_search("c++")
        lessons.find.assert_called_once_with({
            "$or": [
                {"subject": {"$regex": r"c\+\+", "$options": "i"}},
                {"location": {"$regex": r"c\+\+", "$options": "i"}},
            ]
        })

    @pytest.mark.asyncio
    async def test_update_uses_set(self, mongo):
        store, lessons, _, _ = mongo
        lessons.update_one = AsyncMock(return_value=SimpleNamespace(modified_count=1))
        lesson_id = str(ObjectId())
        assert await store.update_lesson(lesson_id, {"spaces": 3}) == 1
        lessons.update_one.assert_awaited_once_with(
            {"_id": ObjectId(lesson_id)}, {"$set": {"spaces": 3}}
        )

    @pytest.mark.asyncio
    async def test_update_invalid_id_skips_driver(self, mongo):
        store, lessons, _, _ = mongo
        lessons.update_one = AsyncMock()
        assert await store.update_lesson("nope", {"spaces": 3}) == 0
        lessons.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_count(self, mongo):
        store, lessons, _, _ = mongo
        lessons.delete_one = AsyncMock(return_value=SimpleNamespace(deleted_count=0))
        assert await store.delete_lesson(str(ObjectId())) == 0

    @pytest.mark.asyncio
    async def test_insert_order_returns_string_id(self, mongo):
        store, _, orders, _ = mongo
        oid = ObjectId()
        orders.insert_one = AsyncMock(return_value=SimpleNamespace(inserted_id=oid))
        assert await store.insert_order({"orderInfo": {}, "lessonId": []}) == str(oid)

    @pytest.mark.asyncio
    async def test_driver_errors_become_store_errors(self, mongo):
        store, lessons, _, _ = mongo
        cursor = MagicMock()
        cursor.to_list = AsyncMock(side_effect=OperationFailure("text index required"))
        lessons.find.return_value = cursor
        with pytest.raises(StoreError, match="text search failed"):
            await store.text_search("math")

    @pytest.mark.asyncio
    async def test_ping(self, mongo):
        store, _, _, client = mongo
        assert await store.ping() is True
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, mongo):
        store, _, _, client = mongo
        await store.close()
        client.close.assert_awaited_once()
