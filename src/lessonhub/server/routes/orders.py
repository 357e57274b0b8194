"""Order placement endpoint."""

from __future__ import annotations

import logging

try:
    from fastapi import APIRouter, Request
except ImportError:
    raise ImportError("FastAPI is required. Install with: pip install lessonhub")

from lessonhub.exceptions import StoreError
from lessonhub.server.deps import get_store
from lessonhub.server.errors import error_response, map_failure
from lessonhub.server.metrics import orders_placed_total
from lessonhub.server.models import OrderCreateRequest, OrderCreateResponse
from lessonhub.server.responses import PrettyJSONResponse
from lessonhub.store.base import is_valid_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


@router.post("/order", response_model=OrderCreateResponse, status_code=201)
async def create_order(body: OrderCreateRequest, request: Request):
    """Persist an order.

    ``lessonId`` must be a list whose entries all look like document IDs.
    Whether the lessons exist is not checked.
    """
    lesson_ids = body.lessonId
    if not isinstance(lesson_ids, list) or not all(is_valid_id(i) for i in lesson_ids):
        return PrettyJSONResponse(
            status_code=400, content={"error": "One or more lesson IDs are invalid."}
        )

    order = {"orderInfo": body.orderInfo, "lessonId": lesson_ids}
    logger.info("Order received for %d lesson(s)", len(lesson_ids))

    store = get_store(request)
    try:
        order_id = await store.insert_order(order)
    except StoreError as exc:
        return error_response(map_failure(exc, "Error saving order"))

    orders_placed_total.inc()
    return OrderCreateResponse(message="Order placed successfully", insertedId=order_id)
