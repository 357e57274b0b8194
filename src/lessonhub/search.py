"""Two-stage lesson search: full-text index first, substring match second.

The resolver returns a tagged outcome so callers (and tests) can tell which
stage produced the lessons:

- ``FullTextHit``: the text index matched at least one lesson.
- ``FallbackHit``: the index matched nothing, but ``subject`` or
  ``location`` of some lesson contains the query, ignoring case.
- ``NoMatch``: neither stage found anything.

Result order is whatever the store returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Union

from lessonhub.store.base import Document, Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FullTextHit:
    lessons: List[Document] = field(default_factory=list)
    stage: str = "full_text"


@dataclass(frozen=True)
class FallbackHit:
    lessons: List[Document] = field(default_factory=list)
    stage: str = "fallback"


@dataclass(frozen=True)
class NoMatch:
    lessons: List[Document] = field(default_factory=list)
    stage: str = "none"


SearchOutcome = Union[FullTextHit, FallbackHit, NoMatch]


async def resolve_search(store: Store, query: str) -> SearchOutcome:
    """Run the two-stage lookup for ``query``.

    Raises ValueError for an empty query without touching the store.
    Store failures propagate as ``StoreError``.
    """
    if not query:
        raise ValueError("Search query is required.")

    lessons = await store.text_search(query)
    if lessons:
        return FullTextHit(lessons)

    logger.debug("No full-text match for %r, trying substring fallback", query)
    lessons = await store.substring_search(query)
    if lessons:
        return FallbackHit(lessons)
    return NoMatch()
