"""MongoDB store backed by the pymongo asyncio client."""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

try:
    from bson import ObjectId
    from pymongo import TEXT, AsyncMongoClient
    from pymongo.errors import PyMongoError
    from pymongo.server_api import ServerApi
except ImportError:
    raise ImportError("pymongo is required. Install with: pip install pymongo")

from lessonhub.exceptions import StoreError
from lessonhub.store.base import (
    SEARCH_FIELDS,
    Document,
    Store,
    is_valid_id,
    to_json_document,
)

logger = logging.getLogger(__name__)

LESSONS = "lessons"
ORDERS = "order"


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


class MongoStore(Store):
    """Store backed by a MongoDB database.

    One client is shared by every request; the driver pools connections.
    """

    def __init__(self, uri: str = "", db_name: str = "", client: Any = None) -> None:
        if client is None:
            if not uri:
                raise ValueError("MongoStore needs a connection string or a client")
            client = AsyncMongoClient(uri, server_api=ServerApi("1"))
        self._client = client
        self._db = client[db_name]
        self.db_name = db_name

    @property
    def lessons(self) -> Any:
        return self._db[LESSONS]

    @property
    def orders(self) -> Any:
        return self._db[ORDERS]

    async def ensure_indexes(self) -> None:
        with _translate_errors("create text index"):
            name = await self.lessons.create_index([(f, TEXT) for f in SEARCH_FIELDS])
        logger.info("Text index ready: %s", name)

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
        except PyMongoError:
            logger.exception("MongoDB ping failed")
            return False
        return True

    async def _find(self, collection: Any, query: Document, operation: str) -> List[Document]:
        with _translate_errors(operation):
            docs = await collection.find(query).to_list()
        return [to_json_document(d) for d in docs]

    async def list_lessons(self) -> List[Document]:
        return await self._find(self.lessons, {}, "list lessons")

    async def text_search(self, query: str) -> List[Document]:
        return await self._find(self.lessons, {"$text": {"$search": query}}, "text search")

    async def substring_search(self, query: str) -> List[Document]:
        pattern = re.escape(query)
        return await self._find(
            self.lessons,
            {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in SEARCH_FIELDS]},
            "substring search",
        )

    async def get_lesson(self, lesson_id: str) -> Optional[Document]:
        if not is_valid_id(lesson_id):
            return None
        with _translate_errors("get lesson"):
            doc = await self.lessons.find_one({"_id": ObjectId(lesson_id)})
        return to_json_document(doc) if doc is not None else None

    async def insert_lesson(self, lesson: Document) -> str:
        with _translate_errors("insert lesson"):
            result = await self.lessons.insert_one(dict(lesson))
        return str(result.inserted_id)

    async def update_lesson(self, lesson_id: str, fields: Document) -> int:
        if not is_valid_id(lesson_id):
            return 0
        with _translate_errors("update lesson"):
            result = await self.lessons.update_one(
                {"_id": ObjectId(lesson_id)}, {"$set": fields}
            )
        return result.modified_count

    async def delete_lesson(self, lesson_id: str) -> int:
        if not is_valid_id(lesson_id):
            return 0
        with _translate_errors("delete lesson"):
            result = await self.lessons.delete_one({"_id": ObjectId(lesson_id)})
        return result.deleted_count

    async def insert_order(self, order: Document) -> str:
        with _translate_errors("insert order"):
            result = await self.orders.insert_one(dict(order))
        return str(result.inserted_id)

    async def get_order(self, order_id: str) -> Optional[Document]:
        if not is_valid_id(order_id):
            return None
        with _translate_errors("get order"):
            doc = await self.orders.find_one({"_id": ObjectId(order_id)})
        return to_json_document(doc) if doc is not None else None

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB client closed")
