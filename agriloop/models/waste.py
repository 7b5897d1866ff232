"""
Waste listing models.

A listing is a lot of agricultural waste a farmer offers for sale. The
nested groups (quantity, price, location, availability, specifications)
mirror the document layout in the ``waste_listings`` collection.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field

from agriloop.models.common import APIModel, Coordinates, Image, Pagination, TimestampedModel
from agriloop.models.user import UserSummary


class WasteType(str, Enum):
    """Kinds of agricultural waste the marketplace trades."""
    COCONUT_SHELL = "coconut_shell"
    RICE_HUSK = "rice_husk"
    SUGARCANE_STALK = "sugarcane_stalk"
    CORN_HUSK = "corn_husk"
    WHEAT_STRAW = "wheat_straw"
    COTTON_STALK = "cotton_stalk"
    OTHER = "other"


class QuantityUnit(str, Enum):
    KG = "kg"
    TON = "ton"
    BAGS = "bags"
    BUNDLES = "bundles"


class Condition(str, Enum):
    RAW = "raw"
    CLEANED = "cleaned"
    PROCESSED = "processed"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    SOLD = "sold"


class Quantity(APIModel):
    amount: float = Field(..., gt=0)
    unit: QuantityUnit


class Price(APIModel):
    amount: float = Field(..., ge=0, description="Price per unit")
    currency: str = Field(default="INR", min_length=3, max_length=3)
    negotiable: bool = True


class ListingLocation(APIModel):
    """Pickup location of a listing. Coordinates drive the radius search."""
    address: str = Field(..., min_length=1)
    coordinates: Coordinates
    district: Optional[str] = None
    state: Optional[str] = None


class Availability(APIModel):
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    harvest_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None


class Specifications(APIModel):
    moisture_content: Optional[float] = Field(None, ge=0, le=100, description="Percent")
    organic_certified: bool = False
    pesticide_free: bool = False


class WasteListingCreate(APIModel):
    """
    Validated listing fields.

    The multipart form carries the nested groups as JSON strings; the
    router decodes them into this model before calling the service.
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    waste_type: Optional[WasteType] = None
    quantity: Quantity
    condition: Condition
    price: Price
    location: ListingLocation
    specifications: Specifications = Field(default_factory=Specifications)


class WasteListingUpdate(APIModel):
    """Partial update; only the fields sent are written."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    waste_type: Optional[WasteType] = None
    quantity: Optional[Quantity] = None
    condition: Optional[Condition] = None
    price: Optional[Price] = None
    location: Optional[ListingLocation] = None
    availability: Optional[Availability] = None
    specifications: Optional[Specifications] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "price": {"amount": 14, "currency": "INR", "negotiable": False},
                "availability": {"status": "available"}
            }
        }
    }


class WasteListing(TimestampedModel):
    """A listing as returned by the API."""
    farmer: Union[UserSummary, str]
    title: str
    description: str
    waste_type: WasteType
    images: List[Image] = Field(default_factory=list)
    quantity: Quantity
    condition: Condition
    price: Price
    location: ListingLocation
    availability: Availability = Field(default_factory=Availability)
    specifications: Specifications = Field(default_factory=Specifications)
    orders: List[str] = Field(default_factory=list)
    views: int = 0
    favorites: List[str] = Field(default_factory=list)


class ListingSummary(APIModel):
    """Listing fields embedded in populated orders."""
    id: str
    title: str
    waste_type: WasteType
    images: List[Image] = Field(default_factory=list)


class ListingEnvelope(APIModel):
    message: str
    listing: WasteListing


class ListingPage(APIModel):
    listings: List[WasteListing]
    pagination: Pagination


class ListingFilters(APIModel):
    """Search filters accepted by ``GET /waste``."""
    waste_type: Optional[WasteType] = None
    condition: Optional[Condition] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius_km: float = Field(50.0, gt=0)


class ClassificationResult(APIModel):
    """Suggested waste type for an image filename."""
    waste_type: WasteType
    confidence: float = Field(..., ge=0, le=1)
    suggested_price: float = Field(..., ge=0, description="Suggested INR price per unit")
