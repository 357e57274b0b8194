"""Centralized failure mapping for request handlers.

Every handler that hits an unexpected failure hands it to ``map_failure``,
which logs the stack server-side and returns an ``ErrorResult``. Only the
generic message reaches the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from lessonhub.server.responses import PrettyJSONResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went wrong!"


@dataclass(frozen=True)
class ErrorResult:
    kind: str
    message: str
    status_code: int = 500

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


def map_failure(
    exc: BaseException,
    context: str = "Unhandled exception",
    message: str = GENERIC_MESSAGE,
) -> ErrorResult:
    """Log ``exc`` with stack detail and return the caller-facing result."""
    logger.error("%s: %s", context, exc, exc_info=(type(exc), exc, exc.__traceback__))
    return ErrorResult(kind="internal", message=message)


def error_response(result: ErrorResult) -> PrettyJSONResponse:
    return PrettyJSONResponse(status_code=result.status_code, content=result.to_dict())
