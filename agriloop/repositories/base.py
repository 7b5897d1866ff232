"""
Shared helpers for the MongoDB repositories.

Repositories accept and return plain dicts. Outbound documents have
``_id`` renamed to ``id`` and every ObjectId rendered as a string, so the
service layer never handles BSON types.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """
    Parse an id received from a client.

    Returns:
        The ObjectId, or None when the value is not a valid 24-hex id
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_ids(values: Iterable[Any]) -> List[ObjectId]:
    """Parse ids, silently dropping malformed ones."""
    parsed = (to_object_id(v) for v in values)
    return [oid for oid in parsed if oid is not None]


def serialize(value: Any) -> Any:
    """Convert a BSON document (or fragment) into API-ready Python values."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            out["id" if key == "_id" else key] = serialize(item)
        return out
    if isinstance(value, list):
        return [serialize(item) for item in value]
    return value


def to_document(value: Any) -> Any:
    """Prepare model dumps for BSON: enums become their values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_document(item) for item in value]
    return value


def flatten_for_set(prefix: str, value: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a nested dict into dotted ``$set`` paths.

    ``{"price": {"amount": 5}}`` becomes ``{"price.amount": 5}`` so a
    partial nested update keeps sibling fields. Empty groups set nothing.
    """
    flat: Dict[str, Any] = {}
    for key, item in value.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(item, dict):
            flat.update(flatten_for_set(path, item))
        else:
            flat[path] = item
    return flat


class MongoRepository:
    """Base class binding a repository to one collection."""

    collection_name: str = ""

    def __init__(self, db: AsyncDatabase):
        """
        Initialize repository.

        Args:
            db: Database handle
        """
        self.db = db
        self.collection: AsyncCollection = db[self.collection_name]

    async def _find(
        self,
        query: Dict[str, Any],
        *,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Dict[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        cursor = self.collection.find(query, projection).sort("created_at", -1)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [serialize(doc) for doc in await cursor.to_list(length=None)]

    async def count(self, query: Dict[str, Any]) -> int:
        return await self.collection.count_documents(query)

    async def get_many(
        self,
        ids: Iterable[Any],
        projection: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """
        Fetch several documents by id in one query.

        Returns:
            Mapping of id to document; unknown or malformed ids are absent
        """
        oids = to_object_ids(set(ids))
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, projection)
        documents = [serialize(doc) for doc in await cursor.to_list(length=None)]
        return {document["id"]: document for document in documents}
