"""JSON response helpers: 3-space indented output, store document encoding."""

from __future__ import annotations

import json
from typing import Any

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class PrettyJSONResponse(JSONResponse):
    """JSONResponse that pretty-prints its body."""

    indent = 3

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=self.indent,
            separators=(",", ": "),
        ).encode("utf-8")


def encode_documents(content: Any) -> Any:
    """Make store documents JSON-safe (ObjectId, datetime, nested values)."""
    return jsonable_encoder(content, custom_encoder={ObjectId: str})
