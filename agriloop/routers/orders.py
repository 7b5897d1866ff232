"""
Order router.

Provides REST API endpoints for:
- Placing an order on an available listing
- Listing the caller's orders (as farmer or creator)
- Status and payment updates
- Order chat and ratings
"""

import structlog
from typing import List
from fastapi import APIRouter, Depends, status

from agriloop.dependencies import get_current_user, get_order_service
from agriloop.models.auth import CurrentUser
from agriloop.models.common import error_responses
from agriloop.models.order import (
    ChatEnvelope,
    ChatRequest,
    Order,
    OrderCreate,
    OrderEnvelope,
    PaymentUpdate,
    RatingRequest,
    StatusUpdate,
)
from agriloop.services.order_service import OrderService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    responses=error_responses(401),
)


@router.post(
    "",
    response_model=OrderEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
    description="""
    Books the listing and opens an order with its farmer.

    **Error Responses:**
    - 400: Listing missing or not available
    """,
    responses=error_responses(400),
)
async def create_order(
    order_request: OrderCreate,
    current_user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
):
    order = await order_service.create_order(current_user, order_request)
    return {"message": "Order created successfully", "order": order}


@router.get(
    "/my-orders",
    response_model=List[Order],
    summary="Own orders",
)
async def my_orders(
    current_user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
):
    return await order_service.my_orders(current_user)


@router.patch(
    "/{order_id}/status",
    response_model=OrderEnvelope,
    summary="Update order status",
    description="""
    Completing the order marks the listing sold; cancelling makes it
    available again. The farmer is credited once the order is completed
    and paid.
    """,
    responses=error_responses(403, 404),
)
async def update_status(
    order_id: str,
    update: StatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
):
    order = await order_service.update_status(order_id, current_user, update.status)
    return {"message": "Order status updated", "order": order}


@router.patch(
    "/{order_id}/payment",
    response_model=OrderEnvelope,
    summary="Update payment status",
    description="Only the order's creator may record payment.",
    responses=error_responses(403, 404),
)
async def update_payment(
    order_id: str,
    update: PaymentUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
):
    order = await order_service.update_payment(order_id, current_user, update.payment_status)
    return {"message": "Payment status updated", "order": order}


@router.post(
    "/{order_id}/chat",
    response_model=ChatEnvelope,
    summary="Send chat message",
    responses=error_responses(403, 404),
)
async def send_message(
    order_id: str,
    chat_request: ChatRequest,
    current_user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
):
    chat = await order_service.add_chat_message(order_id, current_user, chat_request)
    return {"message": "Message sent", "chat": chat}


@router.post(
    "/{order_id}/rating",
    response_model=OrderEnvelope,
    summary="Rate the other party",
    description="""
    Creators rate the farmer and farmers rate the creator, once the order
    is completed.
    """,
    responses=error_responses(400, 403, 404),
)
async def rate_order(
    order_id: str,
    rating_request: RatingRequest,
    current_user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
):
    order = await order_service.rate(order_id, current_user, rating_request)
    return {"message": "Rating submitted", "order": order}
