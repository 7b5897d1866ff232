"""
Showcase repository.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from pymongo import ReturnDocument

from agriloop.database import SHOWCASES
from agriloop.repositories.base import (
    MongoRepository,
    serialize,
    to_document,
    to_object_id,
    utcnow,
)

logger = structlog.get_logger(__name__)


class ShowcaseRepository(MongoRepository):
    """Repository for creator showcases."""

    collection_name = SHOWCASES

    async def create_showcase(self, creator_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        document = to_document({
            **fields,
            "creator": ObjectId(creator_id),
            "likes": [],
            "comments": [],
            "featured": False,
            "created_at": now,
            "updated_at": now,
        })

        try:
            result = await self.collection.insert_one(document)
        except Exception as e:
            logger.error("showcase_create_failed", error=str(e), creator_id=creator_id)
            raise

        document["_id"] = result.inserted_id
        logger.info("showcase_created", showcase_id=str(result.inserted_id), creator_id=creator_id)
        return serialize(document)

    async def get_showcase(self, showcase_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(showcase_id)
        if oid is None:
            return None
        document = await self.collection.find_one({"_id": oid})
        return serialize(document) if document else None

    async def search(self, query: Dict[str, Any], skip: int, limit: int) -> List[Dict[str, Any]]:
        return await self._find(query, skip=skip, limit=limit)

    async def list_by_creator(self, creator_id: str) -> List[Dict[str, Any]]:
        oid = to_object_id(creator_id)
        if oid is None:
            return []
        return await self._find({"creator": oid})

    async def toggle_like(self, showcase_id: str, user_id: str) -> Optional[int]:
        """
        Add or remove ``user_id`` from the showcase's likes.

        Returns:
            Like count after the toggle, or None if the showcase is absent
        """
        oid = to_object_id(showcase_id)
        if oid is None:
            return None
        user_oid = ObjectId(user_id)

        # Pull first; if nothing was pulled the user had not liked it yet.
        document = await self.collection.find_one_and_update(
            {"_id": oid, "likes": user_oid},
            {"$pull": {"likes": user_oid}},
            return_document=ReturnDocument.AFTER,
        )
        liked = False
        if document is None:
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$addToSet": {"likes": user_oid}},
                return_document=ReturnDocument.AFTER,
            )
            liked = document is not None

        if document is None:
            return None
        logger.info("showcase_like_toggled", showcase_id=showcase_id, user_id=user_id, liked=liked)
        return len(document.get("likes", []))

    async def add_comment(self, showcase_id: str, user_id: str, message: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(showcase_id)
        if oid is None:
            return None
        comment = {"user": ObjectId(user_id), "message": message, "timestamp": utcnow()}

        document = await self.collection.find_one_and_update(
            {"_id": oid},
            {
                "$push": {"comments": comment},
                "$set": {"updated_at": utcnow()},
            },
            return_document=ReturnDocument.AFTER,
        )
        return serialize(document) if document else None
