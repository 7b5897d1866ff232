"""
Order service.

Handles placing orders against available listings and the order
lifecycle afterwards: status and payment changes, chat and ratings.

Listing availability follows the order:

- placing an order books the listing
- a completed order marks it sold
- a cancelled order makes it available again

Completed and cancelled are final. The listing is only released or sold
by the order currently holding it.

The farmer's ``earnings.total`` is credited with the order amount once,
the first time the order is both completed and paid.
"""

from typing import Any, Dict, List

import structlog

from agriloop.errors import InvalidRequestError, NotFoundError, PermissionDeniedError
from agriloop.models.auth import CurrentUser
from agriloop.models.order import (
    ChatRequest,
    OrderCreate,
    OrderStatus,
    PaymentStatus,
    RatingRequest,
)
from agriloop.models.waste import AvailabilityStatus
from agriloop.repositories.order_repo import OrderRepository
from agriloop.repositories.user_repo import UserRepository
from agriloop.repositories.waste_repo import WasteListingRepository
from agriloop.services.populate import populate_listings, populate_users
from agriloop_shared.metrics import get_marketplace_metrics
from agriloop_shared.tracing import trace_function

logger = structlog.get_logger(__name__)

LISTING_STATUS_FOR = {
    OrderStatus.COMPLETED: AvailabilityStatus.SOLD,
    OrderStatus.CANCELLED: AvailabilityStatus.AVAILABLE,
}

# no status change leaves these
FINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)
OPEN_STATUSES = tuple(status for status in OrderStatus if status not in FINAL_STATUSES)


def is_settled(order: Dict[str, Any]) -> bool:
    """True when the order is completed and paid."""
    return (
        order.get("status") == OrderStatus.COMPLETED.value
        and order.get("payment_status") == PaymentStatus.PAID.value
    )


def is_party(order: Dict[str, Any], user: CurrentUser) -> bool:
    """
    A farmer is a party when they are the order's farmer; a creator when
    they are its creator.
    """
    field = "farmer" if user.is_farmer() else "creator"
    return order.get(field) == user.id


class OrderService:
    """Service for order operations."""

    def __init__(
        self,
        order_repo: OrderRepository,
        listing_repo: WasteListingRepository,
        user_repo: UserRepository,
    ):
        self.order_repo = order_repo
        self.listing_repo = listing_repo
        self.user_repo = user_repo

    async def _populated(self, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        await populate_listings(self.listing_repo, orders)
        return await populate_users(self.user_repo, orders, fields=("farmer", "creator"))

    async def _get_for_party(self, order_id: str, user: CurrentUser) -> Dict[str, Any]:
        order = await self.order_repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        if not is_party(order, user):
            logger.warning("order_access_denied", order_id=order_id, user_id=user.id, role=user.role.value)
            raise PermissionDeniedError()
        return order

    async def _credit_if_settled(self, order: Dict[str, Any]) -> None:
        if not is_settled(order):
            return
        if await self.order_repo.mark_credited(order["id"]):
            await self.user_repo.increment_earnings(order["farmer"], order["total_amount"])
            logger.info(
                "earnings_credited",
                order_id=order["id"],
                farmer_id=order["farmer"],
                amount=order["total_amount"],
            )

    @trace_function("orders.create")
    async def create_order(self, creator: CurrentUser, data: OrderCreate) -> Dict[str, Any]:
        """
        Place an order on an available listing.

        Raises:
            InvalidRequestError: If the listing is absent or not available
        """
        listing = await self.listing_repo.get_listing(data.waste_listing_id)
        if not listing or listing.get("availability", {}).get("status") != AvailabilityStatus.AVAILABLE.value:
            raise InvalidRequestError("Listing not available", {"listing_id": data.waste_listing_id})

        order_id = self.order_repo.new_id()
        if not await self.listing_repo.book_listing(data.waste_listing_id, order_id):
            # booked by someone else between the read and the update
            raise InvalidRequestError("Listing not available", {"listing_id": data.waste_listing_id})

        order = await self.order_repo.create_order(
            order_id=order_id,
            listing_id=listing["id"],
            farmer_id=listing["farmer"],
            creator_id=creator.id,
            fields=data.model_dump(exclude={"waste_listing_id"}, exclude_none=True),
        )
        get_marketplace_metrics().orders_created.inc()

        (order,) = await self._populated([order])
        return order

    async def my_orders(self, user: CurrentUser) -> List[Dict[str, Any]]:
        party = "farmer" if user.is_farmer() else "creator"
        orders = await self.order_repo.list_for(party, user.id)
        return await self._populated(orders)

    @trace_function("orders.update_status")
    async def update_status(self, order_id: str, user: CurrentUser, status: OrderStatus) -> Dict[str, Any]:
        """
        Move an order to ``status``.

        Raises:
            NotFoundError: If the order does not exist
            PermissionDeniedError: If the caller is not the matching party
            InvalidRequestError: If the order is already completed or cancelled
        """
        current = await self._get_for_party(order_id, user)
        if current.get("status") in {s.value for s in FINAL_STATUSES}:
            raise InvalidRequestError(f"Order is already {current['status']}", {"order_id": order_id})

        order = await self.order_repo.update_status(order_id, status, OPEN_STATUSES)
        if not order:
            # finalised by a concurrent request
            raise InvalidRequestError("Order is already closed", {"order_id": order_id})
        get_marketplace_metrics().order_status_changes.labels(status=status.value).inc()

        listing_status = LISTING_STATUS_FOR.get(status)
        if listing_status is not None:
            released = await self.listing_repo.set_availability(
                order["waste_listing"], listing_status, held_by=order_id
            )
            if not released:
                logger.warning(
                    "listing_not_held_by_order",
                    order_id=order_id,
                    listing_id=order["waste_listing"],
                    status=status.value,
                )

        await self._credit_if_settled(order)
        logger.info("order_status_updated", order_id=order_id, status=status.value, user_id=user.id)

        (order,) = await self._populated([order])
        return order

    async def update_payment(
        self,
        order_id: str,
        user: CurrentUser,
        payment_status: PaymentStatus,
    ) -> Dict[str, Any]:
        """
        Record the payment state of an order. Only its creator may do this.

        Raises:
            NotFoundError: If the order does not exist
            PermissionDeniedError: If the caller is not the order's creator
        """
        if not user.is_creator():
            raise PermissionDeniedError()
        await self._get_for_party(order_id, user)

        order = await self.order_repo.update_order(order_id, {"payment_status": payment_status})
        if not order:
            raise NotFoundError("Order", order_id)

        await self._credit_if_settled(order)
        logger.info("order_payment_updated", order_id=order_id, payment_status=payment_status.value)

        (order,) = await self._populated([order])
        return order

    async def add_chat_message(self, order_id: str, user: CurrentUser, data: ChatRequest) -> List[Dict[str, Any]]:
        """
        Append a message to the order's chat.

        Returns:
            The whole chat thread with senders populated
        """
        await self._get_for_party(order_id, user)

        order = await self.order_repo.push_chat(order_id, user.id, data.message, data.message_type.value)
        if not order:
            raise NotFoundError("Order", order_id)

        await populate_users(self.user_repo, [order], nested=("chat.sender",))
        return order["chat"]

    async def rate(self, order_id: str, user: CurrentUser, data: RatingRequest) -> Dict[str, Any]:
        """
        Rate the other party of a completed order.

        A creator rates the farmer and a farmer rates the creator.

        Raises:
            InvalidRequestError: If the order is not completed
        """
        order = await self._get_for_party(order_id, user)
        if order.get("status") != OrderStatus.COMPLETED.value:
            raise InvalidRequestError("Only completed orders can be rated")

        side = "farmer" if user.is_creator() else "creator"
        fields: Dict[str, Any] = {f"rating.{side}_rating": data.rating}
        if data.review is not None:
            fields[f"rating.{side}_review"] = data.review

        order = await self.order_repo.update_order(order_id, fields)
        if not order:
            raise NotFoundError("Order", order_id)
        logger.info("order_rated", order_id=order_id, rated=side, rating=data.rating)

        (order,) = await self._populated([order])
        return order
