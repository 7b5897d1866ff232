"""
Order repository.

Orders reference their listing, farmer and creator by ObjectId. The
``earnings_credited`` flag records that the farmer has been paid out for
the order so the credit happens once.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog
from bson import ObjectId
from pymongo import ReturnDocument

from agriloop.database import ORDERS
from agriloop.models.order import OrderStatus, PaymentStatus
from agriloop.repositories.base import (
    MongoRepository,
    serialize,
    to_document,
    to_object_id,
    utcnow,
)

logger = structlog.get_logger(__name__)

PARTY_FIELDS = ("farmer", "creator")


class OrderRepository(MongoRepository):
    """Repository for order operations."""

    collection_name = ORDERS

    @staticmethod
    def new_id() -> str:
        """Reserve an id so the listing can be booked before the insert."""
        return str(ObjectId())

    async def create_order(
        self,
        order_id: str,
        listing_id: str,
        farmer_id: str,
        creator_id: str,
        fields: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Insert an order under a pre-allocated id.

        Args:
            order_id: Id from ``new_id``
            listing_id: Booked listing
            farmer_id: The listing's farmer
            creator_id: The buyer
            fields: quantity, total_amount and optional pickup

        Returns:
            Created order
        """
        now = utcnow()
        document = to_document({
            **fields,
            "_id": ObjectId(order_id),
            "waste_listing": ObjectId(listing_id),
            "farmer": ObjectId(farmer_id),
            "creator": ObjectId(creator_id),
            "status": OrderStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "chat": [],
            "rating": {},
            "earnings_credited": False,
            "created_at": now,
            "updated_at": now,
        })

        try:
            await self.collection.insert_one(document)
        except Exception as e:
            logger.error("order_create_failed", error=str(e), listing_id=listing_id)
            raise

        logger.info(
            "order_created",
            order_id=order_id,
            listing_id=listing_id,
            farmer_id=farmer_id,
            creator_id=creator_id,
        )
        return serialize(document)

    async def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(order_id)
        if oid is None:
            return None
        document = await self.collection.find_one({"_id": oid})
        return serialize(document) if document else None

    async def list_for(self, party: str, user_id: str) -> List[Dict[str, Any]]:
        """
        Orders where ``user_id`` is the given party, newest first.

        Args:
            party: "farmer" or "creator"
            user_id: The party's user id
        """
        if party not in PARTY_FIELDS:
            raise ValueError(f"party must be one of {PARTY_FIELDS}, got: {party}")
        oid = to_object_id(user_id)
        if oid is None:
            return []
        return await self._find({party: oid})

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Set top-level or dotted fields on an order.

        Returns:
            Updated order or None if not found
        """
        oid = to_object_id(order_id)
        if oid is None:
            return None

        document = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**to_document(fields), "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not document:
            return None
        logger.info("order_updated", order_id=order_id, fields=sorted(fields))
        return serialize(document)

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        from_statuses: Sequence[OrderStatus],
    ) -> Optional[Dict[str, Any]]:
        """
        Move an order to ``status`` if it is currently in one of ``from_statuses``.

        Returns:
            Updated order, or None if not found or in another status
        """
        oid = to_object_id(order_id)
        if oid is None:
            return None

        document = await self.collection.find_one_and_update(
            {"_id": oid, "status": {"$in": [s.value for s in from_statuses]}},
            {"$set": {"status": status.value, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not document:
            return None
        logger.info("order_status_set", order_id=order_id, status=status.value)
        return serialize(document)

    async def push_chat(
        self,
        order_id: str,
        sender_id: str,
        message: str,
        message_type: str,
    ) -> Optional[Dict[str, Any]]:
        """Append a chat message. Returns the updated order or None if absent."""
        oid = to_object_id(order_id)
        if oid is None:
            return None
        entry = {
            "sender": ObjectId(sender_id),
            "message": message,
            "message_type": message_type,
            "timestamp": utcnow(),
        }

        document = await self.collection.find_one_and_update(
            {"_id": oid},
            {
                "$push": {"chat": to_document(entry)},
                "$set": {"updated_at": utcnow()},
            },
            return_document=ReturnDocument.AFTER,
        )
        return serialize(document) if document else None

    async def mark_credited(self, order_id: str) -> bool:
        """
        Flip ``earnings_credited`` from false to true.

        Returns:
            True only for the caller that flipped it
        """
        oid = to_object_id(order_id)
        if oid is None:
            return False

        result = await self.collection.update_one(
            {"_id": oid, "earnings_credited": {"$ne": True}},
            {"$set": {"earnings_credited": True}},
        )
        return result.modified_count == 1
