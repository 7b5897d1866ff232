"""
Waste listing repository.

Listings live in the ``waste_listings`` collection. Every write that
touches ``location.coordinates`` also refreshes ``location.geo``, the
GeoJSON point behind the 2dsphere index.
"""

from typing import Any, Dict, Iterable, List, Optional

import structlog
from bson import ObjectId
from pymongo import ReturnDocument

from agriloop.database import WASTE_LISTINGS
from agriloop.models.waste import AvailabilityStatus, ListingFilters
from agriloop.repositories.base import (
    MongoRepository,
    flatten_for_set,
    serialize,
    to_document,
    to_object_id,
    utcnow,
)

logger = structlog.get_logger(__name__)

EARTH_RADIUS_KM = 6378.1

SUMMARY_FIELDS = {"title": 1, "waste_type": 1, "images": 1}


def geo_point(coordinates: Dict[str, float]) -> Dict[str, Any]:
    """GeoJSON point for a {latitude, longitude} pair. GeoJSON orders lng first."""
    return {
        "type": "Point",
        "coordinates": [coordinates["longitude"], coordinates["latitude"]],
    }


def build_listing_filter(filters: ListingFilters) -> Dict[str, Any]:
    """
    Translate search filters into a MongoDB query.

    Only available listings are searchable. The radius filter applies only
    when both latitude and longitude are given, and uses ``$geoWithin``
    so the same query also works with ``count_documents``.
    """
    query: Dict[str, Any] = {"availability.status": AvailabilityStatus.AVAILABLE.value}

    if filters.waste_type:
        query["waste_type"] = filters.waste_type.value
    if filters.condition:
        query["condition"] = filters.condition.value

    if filters.min_price is not None or filters.max_price is not None:
        price: Dict[str, float] = {}
        if filters.min_price is not None:
            price["$gte"] = filters.min_price
        if filters.max_price is not None:
            price["$lte"] = filters.max_price
        query["price.amount"] = price

    if filters.latitude is not None and filters.longitude is not None:
        query["location.geo"] = {
            "$geoWithin": {
                "$centerSphere": [
                    [filters.longitude, filters.latitude],
                    filters.radius_km / EARTH_RADIUS_KM,
                ]
            }
        }

    return query


class WasteListingRepository(MongoRepository):
    """Repository for waste listing operations."""

    collection_name = WASTE_LISTINGS

    async def create_listing(self, farmer_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a listing with schema defaults applied.

        Args:
            farmer_id: Owning farmer
            fields: Validated listing fields (title, quantity, location, ...)

        Returns:
            Created listing
        """
        now = utcnow()
        document = to_document({
            **fields,
            "farmer": ObjectId(farmer_id),
            "availability": fields.get("availability") or {"status": AvailabilityStatus.AVAILABLE.value},
            "orders": [],
            "views": 0,
            "favorites": [],
            "created_at": now,
            "updated_at": now,
        })
        document["location"]["geo"] = geo_point(document["location"]["coordinates"])

        try:
            result = await self.collection.insert_one(document)
        except Exception as e:
            logger.error("listing_create_failed", error=str(e), farmer_id=farmer_id)
            raise

        document["_id"] = result.inserted_id
        logger.info("listing_created", listing_id=str(result.inserted_id), farmer_id=farmer_id)
        return serialize(document)

    async def get_listing(self, listing_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(listing_id)
        if oid is None:
            return None
        document = await self.collection.find_one({"_id": oid})
        return serialize(document) if document else None

    async def get_summaries(self, listing_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Populated-reference view of several listings, keyed by id."""
        return await self.get_many(listing_ids, SUMMARY_FIELDS)

    async def increment_views(self, listing_id: str) -> Optional[Dict[str, Any]]:
        """
        Count one view and return the listing after the increment.

        Returns:
            Listing or None if not found
        """
        oid = to_object_id(listing_id)
        if oid is None:
            return None
        document = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$inc": {"views": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return serialize(document) if document else None

    async def search(self, query: Dict[str, Any], skip: int, limit: int) -> List[Dict[str, Any]]:
        """Newest-first page of listings matching ``query``."""
        return await self._find(query, skip=skip, limit=limit)

    async def list_by_farmer(self, farmer_id: str) -> List[Dict[str, Any]]:
        oid = to_object_id(farmer_id)
        if oid is None:
            return []
        return await self._find({"farmer": oid})

    async def update_listing(
        self,
        listing_id: str,
        farmer_id: str,
        fields: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to a listing owned by ``farmer_id``.

        Returns:
            Updated listing, or None when it does not exist or is not owned
        """
        oid = to_object_id(listing_id)
        owner = to_object_id(farmer_id)
        if oid is None or owner is None:
            return None

        changes = flatten_for_set("", to_document(fields))
        coordinates = (fields.get("location") or {}).get("coordinates")
        if coordinates:
            changes["location.geo"] = geo_point(coordinates)
        changes["updated_at"] = utcnow()

        try:
            document = await self.collection.find_one_and_update(
                {"_id": oid, "farmer": owner},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            logger.error("listing_update_failed", error=str(e), listing_id=listing_id)
            raise

        if not document:
            return None
        logger.info("listing_updated", listing_id=listing_id, fields=sorted(fields))
        return serialize(document)

    async def delete_listing(self, listing_id: str, farmer_id: str) -> bool:
        """Delete a listing owned by ``farmer_id``. False if absent or not owned."""
        oid = to_object_id(listing_id)
        owner = to_object_id(farmer_id)
        if oid is None or owner is None:
            return False

        document = await self.collection.find_one_and_delete({"_id": oid, "farmer": owner})
        if document:
            logger.info("listing_deleted", listing_id=listing_id)
        return document is not None

    async def book_listing(self, listing_id: str, order_id: str) -> Optional[Dict[str, Any]]:
        """
        Mark an available listing booked and attach the order to it.

        The status check and the write are one atomic update, so two
        buyers cannot book the same listing.

        Returns:
            Booked listing, or None if it was missing or not available
        """
        oid = to_object_id(listing_id)
        if oid is None:
            return None

        document = await self.collection.find_one_and_update(
            {"_id": oid, "availability.status": AvailabilityStatus.AVAILABLE.value},
            {
                "$set": {
                    "availability.status": AvailabilityStatus.BOOKED.value,
                    "updated_at": utcnow(),
                },
                "$push": {"orders": ObjectId(order_id)},
            },
            return_document=ReturnDocument.AFTER,
        )
        return serialize(document) if document else None

    async def set_availability(
        self,
        listing_id: str,
        status: AvailabilityStatus,
        held_by: Optional[str] = None,
    ) -> bool:
        """
        Set the listing's availability status.

        With ``held_by``, only a listing that is booked and whose most recent
        order is ``held_by`` is changed.

        Returns:
            True if a listing was matched
        """
        oid = to_object_id(listing_id)
        if oid is None:
            return False

        query: Dict[str, Any] = {"_id": oid}
        if held_by is not None:
            holder = to_object_id(held_by)
            if holder is None:
                return False
            query["availability.status"] = AvailabilityStatus.BOOKED.value
            query["$expr"] = {"$eq": [{"$arrayElemAt": ["$orders", -1]}, holder]}

        result = await self.collection.update_one(
            query,
            {"$set": {"availability.status": status.value, "updated_at": utcnow()}},
        )
        return result.matched_count == 1
