"""
User repository for database operations.

Provides async CRUD operations for users in the ``users`` collection.
"""

from typing import Any, Dict, Iterable, Optional

import structlog
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from agriloop.database import USERS
from agriloop.repositories.base import (
    MongoRepository,
    serialize,
    to_document,
    to_object_id,
    utcnow,
)

logger = structlog.get_logger(__name__)

SUMMARY_FIELDS = {"name": 1, "phone": 1, "location": 1, "profile": 1}


class UserRepository(MongoRepository):
    """Repository for user database operations."""

    collection_name = USERS

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str,
        phone: str,
        location: Optional[Dict[str, Any]] = None,
        profile: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create a new user with schema defaults applied.

        Returns:
            Created user, including the password hash

        Raises:
            ValueError: If the email already exists
        """
        now = utcnow()
        document = to_document({
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "role": role,
            "phone": phone,
            "location": location or {},
            "profile": profile or {},
            "earnings": {"total": 0, "pending": 0, "withdrawn": 0},
            "eco_credits": 0,
            "is_verified": False,
            "created_at": now,
            "updated_at": now,
        })

        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError:
            logger.warning("email_already_exists", email=email)
            raise ValueError(f"Email '{email}' already exists")
        except Exception as e:
            logger.error("user_create_failed", error=str(e), email=email)
            raise

        document["_id"] = result.inserted_id
        logger.info("user_created", user_id=str(result.inserted_id), role=role)
        return serialize(document)

    async def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get user by ID.

        Returns:
            User or None if not found (malformed ids are not found)
        """
        oid = to_object_id(user_id)
        if oid is None:
            return None

        document = await self.collection.find_one({"_id": oid})
        if not document:
            logger.debug("user_not_found", user_id=user_id)
            return None
        return serialize(document)

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        document = await self.collection.find_one({"email": email.lower()})
        if not document:
            logger.debug("user_not_found", email=email)
            return None
        return serialize(document)

    async def get_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        Fetch the populated-reference view of several users at once.

        Returns:
            Mapping of user id to summary dict; unknown ids are absent
        """
        return await self.get_many(user_ids, SUMMARY_FIELDS)

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Set the given (dotted) fields.

        Returns:
            Updated user or None if not found
        """
        oid = to_object_id(user_id)
        if oid is None:
            return None

        try:
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": {**to_document(fields), "updated_at": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            logger.error("user_update_failed", error=str(e), user_id=user_id)
            raise

        if not document:
            return None
        logger.info("user_updated", user_id=user_id, fields=sorted(fields))
        return serialize(document)

    async def increment_earnings(self, user_id: str, amount: float) -> bool:
        """Atomically add ``amount`` to ``earnings.total``."""
        oid = to_object_id(user_id)
        if oid is None:
            return False

        result = await self.collection.update_one(
            {"_id": oid},
            {"$inc": {"earnings.total": amount}, "$set": {"updated_at": utcnow()}},
        )
        credited = result.modified_count == 1
        logger.info("earnings_incremented", user_id=user_id, amount=amount, credited=credited)
        return credited
