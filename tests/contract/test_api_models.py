"""
Contract tests for the API schemas.

The wire format is camelCase while documents are stored snake_case;
these tests pin both directions and the validation bounds clients rely on.
"""

import pytest
from pydantic import ValidationError

from agriloop.models.auth import RegisterRequest
from agriloop.models.common import Pagination
from agriloop.models.order import Order, OrderCreate
from agriloop.models.showcase import ShowcaseCreate
from agriloop.models.user import UserResponse
from agriloop.models.waste import ListingFilters, WasteListing, WasteListingCreate

USER_ID = "665f1c2e9b1e8a001234567a"


def listing_document(**overrides) -> dict:
    document = {
        "id": "665f1c2e9b1e8a0012345678",
        "farmer": USER_ID,
        "title": "Coconut shells",
        "description": "Dry",
        "waste_type": "coconut_shell",
        "images": [{"url": "https://via.placeholder.com/400x300?text=a.jpg", "public_id": "waste_1_abc"}],
        "quantity": {"amount": 200, "unit": "kg"},
        "condition": "raw",
        "price": {"amount": 15, "currency": "INR", "negotiable": True},
        "location": {
            "address": "Thrissur",
            "coordinates": {"latitude": 10.5, "longitude": 76.2},
            "geo": {"type": "Point", "coordinates": [76.2, 10.5]},
        },
        "availability": {"status": "available"},
        "views": 3,
    }
    document.update(overrides)
    return document


class TestRegisterRequest:

    def test_accepts_camel_case_payload(self):
        request = RegisterRequest.model_validate({
            "name": "Lakshmi",
            "email": "LAKSHMI@Example.COM",
            "password": "coconut123",
            "role": "farmer",
            "phone": "+919876543210",
            "profile": {"bio": "Grower", "experience": 12},
        })

        assert request.email == "lakshmi@example.com"
        assert request.profile.experience == 12

    @pytest.mark.parametrize(
        "overrides",
        [
            {"password": "short"},
            {"role": "admin"},
            {"email": "not-an-email"},
            {"name": "   "},
        ],
    )
    def test_rejects(self, overrides):
        payload = {
            "name": "Lakshmi",
            "email": "lakshmi@example.com",
            "password": "coconut123",
            "role": "farmer",
            "phone": "+919876543210",
        }
        payload.update(overrides)

        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(payload)


class TestUserResponse:

    def test_dumps_camel_case_without_password(self):
        user = UserResponse.model_validate({
            "id": USER_ID,
            "name": "Lakshmi",
            "email": "lakshmi@example.com",
            "password_hash": "$2b$04$abc",
            "role": "farmer",
            "phone": "+919876543210",
            "eco_credits": 5,
            "is_verified": True,
        })

        body = user.model_dump(by_alias=True)

        assert body["ecoCredits"] == 5
        assert body["isVerified"] is True
        assert "passwordHash" not in body
        assert "password_hash" not in body


class TestWasteListing:

    def test_farmer_as_id(self):
        listing = WasteListing.model_validate(listing_document())
        assert listing.farmer == USER_ID

    def test_farmer_populated(self):
        listing = WasteListing.model_validate(
            listing_document(farmer={"id": USER_ID, "name": "Lakshmi", "phone": "+91"})
        )

        body = listing.model_dump(by_alias=True)
        assert body["farmer"]["name"] == "Lakshmi"
        assert body["wasteType"] == "coconut_shell"
        assert body["images"][0]["publicId"] == "waste_1_abc"

    def test_create_requires_coordinates(self):
        with pytest.raises(ValidationError):
            WasteListingCreate.model_validate({
                "title": "x",
                "description": "y",
                "quantity": {"amount": 1, "unit": "kg"},
                "condition": "raw",
                "price": {"amount": 1},
                "location": {"address": "Thrissur"},
            })

    @pytest.mark.parametrize("unit", ["kg", "ton", "bags", "bundles"])
    def test_quantity_units(self, unit):
        listing = WasteListing.model_validate(listing_document(quantity={"amount": 1, "unit": unit}))
        assert listing.quantity.unit.value == unit


class TestOrder:

    def test_null_rating_becomes_empty(self):
        order = Order.model_validate({
            "id": "665f1c2e9b1e8a0012345679",
            "waste_listing": "665f1c2e9b1e8a0012345678",
            "farmer": USER_ID,
            "creator": USER_ID,
            "quantity": {"amount": 200, "unit": "kg"},
            "total_amount": 3000,
            "rating": None,
        })

        assert order.rating.farmer_rating is None
        assert order.model_dump(by_alias=True)["paymentStatus"] == "pending"

    def test_create_from_camel_case(self):
        request = OrderCreate.model_validate({
            "wasteListingId": "665f1c2e9b1e8a0012345678",
            "quantity": {"amount": 200, "unit": "kg"},
            "totalAmount": 3000,
            "pickup": {"scheduledDate": "2024-06-01T09:00:00Z"},
        })

        assert request.waste_listing_id == "665f1c2e9b1e8a0012345678"
        assert request.pickup.scheduled_date.year == 2024

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({
                "wasteListingId": "x",
                "quantity": {"amount": 1, "unit": "kg"},
                "totalAmount": -1,
            })


class TestShowcaseCreate:

    def test_category_enum(self):
        with pytest.raises(ValidationError):
            ShowcaseCreate(title="Lamp", description="Coir lamp", category="jewellery")


class TestListingFilters:

    @pytest.mark.parametrize(
        "field,value",
        [
            ("latitude", 91),
            ("longitude", -181),
            ("min_price", -1),
            ("radius_km", 0),
        ],
    )
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            ListingFilters(**{field: value})


def test_pagination_shape():
    assert Pagination(current=2, pages=5, total=50).model_dump(by_alias=True) == {
        "current": 2,
        "pages": 5,
        "total": 50,
    }
