"""
In-memory stand-ins for the MongoDB repositories.

Each fake keeps the public method signatures of its repository and returns
documents in the same shape (``id`` strings, snake_case keys), so services
and routers run unchanged on top of them. Returned documents are deep
copies: services populate references in place.
"""

import copy
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

from agriloop.models.order import OrderStatus, PaymentStatus
from agriloop.models.waste import AvailabilityStatus
from agriloop.repositories.base import flatten_for_set, to_document
from agriloop.repositories.user_repo import SUMMARY_FIELDS as USER_SUMMARY_FIELDS
from agriloop.repositories.waste_repo import SUMMARY_FIELDS as LISTING_SUMMARY_FIELDS
from agriloop.repositories.waste_repo import geo_point

_clock = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _now() -> datetime:
    # strictly increasing so newest-first ordering is deterministic
    global _clock
    _clock = _clock + timedelta(seconds=1)
    return _clock


def _get(document: Dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _set(document: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    target = document
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[parts[-1]] = value


def _central_angle(a: List[float], b: List[float]) -> float:
    lng1, lat1, lng2, lat2 = map(math.radians, (a[0], a[1], b[0], b[1]))
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lng2 - lng1) / 2) ** 2
    )
    return 2 * math.asin(math.sqrt(h))


def matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate the subset of MongoDB query operators the services emit."""
    for path, condition in query.items():
        value = _get(document, path)
        if isinstance(condition, dict) and condition and all(key.startswith("$") for key in condition):
            for operator, argument in condition.items():
                if operator == "$gte" and not (value is not None and value >= argument):
                    return False
                if operator == "$lte" and not (value is not None and value <= argument):
                    return False
                if operator == "$geoWithin":
                    center, radians = argument["$centerSphere"]
                    if value is None or _central_angle(center, value["coordinates"]) > radians:
                        return False
        elif value != condition:
            return False
    return True


def _project(document: Dict[str, Any], fields: Dict[str, int]) -> Dict[str, Any]:
    projected = {"id": document["id"]}
    for field in fields:
        if field in document:
            projected[field] = copy.deepcopy(document[field])
    return projected


class _FakeCollection:
    def __init__(self):
        self.documents: List[Dict[str, Any]] = []

    def _by_id(self, document_id: Any) -> Optional[Dict[str, Any]]:
        for document in self.documents:
            if document["id"] == str(document_id):
                return document
        return None

    def _newest_first(self, documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ordered = sorted(documents, key=lambda d: d["created_at"], reverse=True)
        return copy.deepcopy(ordered)

    async def count(self, query: Dict[str, Any]) -> int:
        return sum(1 for document in self.documents if matches(document, query))

    async def search(self, query: Dict[str, Any], skip: int, limit: int) -> List[Dict[str, Any]]:
        found = self._newest_first(d for d in self.documents if matches(d, query))
        return found[skip:skip + limit] if limit else found[skip:]


class FakeUserRepository(_FakeCollection):
    """In-memory ``UserRepository``."""

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
        if any(document["email"] == email.lower() for document in self.documents):
            raise ValueError(f"Email '{email}' already exists")
        now = _now()
        document = to_document({
            "id": str(ObjectId()),
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
        self.documents.append(document)
        return copy.deepcopy(document)

    async def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(user_id)
        return copy.deepcopy(document) if document else None

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for document in self.documents:
            if document["email"] == email.lower():
                return copy.deepcopy(document)
        return None

    async def get_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        summaries = {}
        for user_id in set(user_ids):
            document = self._by_id(user_id)
            if document:
                summaries[document["id"]] = _project(document, USER_SUMMARY_FIELDS)
        return summaries

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        document = self._by_id(user_id)
        if not document:
            return None
        for path, value in to_document(fields).items():
            _set(document, path, value)
        document["updated_at"] = _now()
        return copy.deepcopy(document)

    async def increment_earnings(self, user_id: str, amount: float) -> bool:
        document = self._by_id(user_id)
        if not document:
            return False
        document["earnings"]["total"] += amount
        return True


class FakeListingRepository(_FakeCollection):
    """In-memory ``WasteListingRepository``."""

    async def create_listing(self, farmer_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        document = to_document(copy.deepcopy({
            **fields,
            "id": str(ObjectId()),
            "farmer": farmer_id,
            "availability": fields.get("availability") or {"status": AvailabilityStatus.AVAILABLE.value},
            "orders": [],
            "views": 0,
            "favorites": [],
            "created_at": now,
            "updated_at": now,
        }))
        document["location"]["geo"] = geo_point(document["location"]["coordinates"])
        self.documents.append(document)
        return copy.deepcopy(document)

    async def get_listing(self, listing_id: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(listing_id)
        return copy.deepcopy(document) if document else None

    async def get_summaries(self, listing_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        summaries = {}
        for listing_id in set(listing_ids):
            document = self._by_id(listing_id)
            if document:
                summaries[document["id"]] = _project(document, LISTING_SUMMARY_FIELDS)
        return summaries

    async def increment_views(self, listing_id: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(listing_id)
        if not document:
            return None
        document["views"] += 1
        return copy.deepcopy(document)

    async def list_by_farmer(self, farmer_id: str) -> List[Dict[str, Any]]:
        return self._newest_first(d for d in self.documents if d["farmer"] == farmer_id)

    async def update_listing(self, listing_id: str, farmer_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        document = self._by_id(listing_id)
        if not document or document["farmer"] != farmer_id:
            return None
        for path, value in flatten_for_set("", to_document(fields)).items():
            _set(document, path, value)
        coordinates = (fields.get("location") or {}).get("coordinates")
        if coordinates:
            document["location"]["geo"] = geo_point(coordinates)
        document["updated_at"] = _now()
        return copy.deepcopy(document)

    async def delete_listing(self, listing_id: str, farmer_id: str) -> bool:
        document = self._by_id(listing_id)
        if not document or document["farmer"] != farmer_id:
            return False
        self.documents.remove(document)
        return True

    async def book_listing(self, listing_id: str, order_id: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(listing_id)
        if not document or document["availability"]["status"] != AvailabilityStatus.AVAILABLE.value:
            return None
        document["availability"]["status"] = AvailabilityStatus.BOOKED.value
        document["orders"].append(order_id)
        return copy.deepcopy(document)

    async def set_availability(
        self,
        listing_id: str,
        status: AvailabilityStatus,
        held_by: Optional[str] = None,
    ) -> bool:
        document = self._by_id(listing_id)
        if not document:
            return False
        if held_by is not None and (
            document["availability"].get("status") != AvailabilityStatus.BOOKED.value
            or not document["orders"]
            or document["orders"][-1] != held_by
        ):
            return False
        document["availability"]["status"] = status.value
        return True


class FakeOrderRepository(_FakeCollection):
    """In-memory ``OrderRepository``."""

    @staticmethod
    def new_id() -> str:
        return str(ObjectId())

    async def create_order(
        self,
        order_id: str,
        listing_id: str,
        farmer_id: str,
        creator_id: str,
        fields: Dict[str, Any],
    ) -> Dict[str, Any]:
        now = _now()
        document = to_document(copy.deepcopy({
            **fields,
            "id": order_id,
            "waste_listing": listing_id,
            "farmer": farmer_id,
            "creator": creator_id,
            "status": OrderStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "chat": [],
            "rating": {},
            "earnings_credited": False,
            "created_at": now,
            "updated_at": now,
        }))
        self.documents.append(document)
        return copy.deepcopy(document)

    async def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(order_id)
        return copy.deepcopy(document) if document else None

    async def list_for(self, party: str, user_id: str) -> List[Dict[str, Any]]:
        return self._newest_first(d for d in self.documents if d[party] == user_id)

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        document = self._by_id(order_id)
        if not document:
            return None
        for path, value in to_document(fields).items():
            _set(document, path, value)
        document["updated_at"] = _now()
        return copy.deepcopy(document)

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        from_statuses: Iterable[OrderStatus],
    ) -> Optional[Dict[str, Any]]:
        document = self._by_id(order_id)
        if not document or document["status"] not in {s.value for s in from_statuses}:
            return None
        document["status"] = status.value
        document["updated_at"] = _now()
        return copy.deepcopy(document)

    async def push_chat(self, order_id: str, sender_id: str, message: str, message_type: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(order_id)
        if not document:
            return None
        document["chat"].append({
            "sender": sender_id,
            "message": message,
            "message_type": message_type,
            "timestamp": _now(),
        })
        return copy.deepcopy(document)

    async def mark_credited(self, order_id: str) -> bool:
        document = self._by_id(order_id)
        if not document or document.get("earnings_credited"):
            return False
        document["earnings_credited"] = True
        return True


class FakeShowcaseRepository(_FakeCollection):
    """In-memory ``ShowcaseRepository``."""

    async def create_showcase(self, creator_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        document = to_document(copy.deepcopy({
            **fields,
            "id": str(ObjectId()),
            "creator": creator_id,
            "likes": [],
            "comments": [],
            "featured": False,
            "created_at": now,
            "updated_at": now,
        }))
        self.documents.append(document)
        return copy.deepcopy(document)

    async def get_showcase(self, showcase_id: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(showcase_id)
        return copy.deepcopy(document) if document else None

    async def list_by_creator(self, creator_id: str) -> List[Dict[str, Any]]:
        return self._newest_first(d for d in self.documents if d["creator"] == creator_id)

    async def toggle_like(self, showcase_id: str, user_id: str) -> Optional[int]:
        document = self._by_id(showcase_id)
        if not document:
            return None
        if user_id in document["likes"]:
            document["likes"].remove(user_id)
        else:
            document["likes"].append(user_id)
        return len(document["likes"])

    async def add_comment(self, showcase_id: str, user_id: str, message: str) -> Optional[Dict[str, Any]]:
        document = self._by_id(showcase_id)
        if not document:
            return None
        document["comments"].append({"user": user_id, "message": message, "timestamp": _now()})
        return copy.deepcopy(document)
