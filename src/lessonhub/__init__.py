"""lessonhub: lesson catalogue and order backend."""

from lessonhub.exceptions import StoreError, StoreNotConfiguredError
from lessonhub.search import FallbackHit, FullTextHit, NoMatch, resolve_search

__version__ = "0.3.0"

__all__ = [
    "FallbackHit",
    "FullTextHit",
    "NoMatch",
    "StoreError",
    "StoreNotConfiguredError",
    "resolve_search",
]
