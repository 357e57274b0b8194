"""Storage backends for lessonhub."""

from lessonhub.store.base import Document, Store, is_valid_id
from lessonhub.store.memory import MemoryStore
from lessonhub.store.mongo import MongoStore

__all__ = ["Document", "Store", "MemoryStore", "MongoStore", "is_valid_id"]
