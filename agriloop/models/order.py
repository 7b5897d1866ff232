"""
Order models.

An order links one listing, its farmer and the buying creator, and carries
the pickup details, a chat thread and the two-sided rating.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field, model_validator

from agriloop.models.common import APIModel, TimestampedModel
from agriloop.models.user import UserSummary
from agriloop.models.waste import ListingSummary, QuantityUnit


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PICKED_UP = "picked_up"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class OrderQuantity(APIModel):
    amount: float = Field(..., gt=0)
    unit: QuantityUnit


class Pickup(APIModel):
    scheduled_date: Optional[datetime] = None
    actual_date: Optional[datetime] = None
    address: Optional[str] = None
    instructions: Optional[str] = Field(None, max_length=1000)


class ChatMessage(APIModel):
    sender: Union[UserSummary, str]
    message: str
    timestamp: datetime
    message_type: MessageType = MessageType.TEXT


class Rating(APIModel):
    farmer_rating: Optional[int] = Field(None, ge=1, le=5)
    creator_rating: Optional[int] = Field(None, ge=1, le=5)
    farmer_review: Optional[str] = None
    creator_review: Optional[str] = None


class OrderCreate(APIModel):
    """Request body for placing an order."""
    waste_listing_id: str = Field(..., min_length=1)
    quantity: OrderQuantity
    total_amount: float = Field(..., ge=0)
    pickup: Optional[Pickup] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "wasteListingId": "665f1c2e9b1e8a0012345678",
                "quantity": {"amount": 200, "unit": "kg"},
                "totalAmount": 3000,
                "pickup": {"address": "Farm gate, Thrissur"}
            }
        }
    }


class StatusUpdate(APIModel):
    status: OrderStatus


class PaymentUpdate(APIModel):
    payment_status: PaymentStatus


class ChatRequest(APIModel):
    message: str = Field(..., min_length=1, max_length=2000)
    message_type: MessageType = MessageType.TEXT


class RatingRequest(APIModel):
    """Rating of the other party; 1-5 stars and an optional review."""
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=2000)


class Order(TimestampedModel):
    """An order as returned by the API."""
    waste_listing: Union[ListingSummary, str]
    farmer: Union[UserSummary, str]
    creator: Union[UserSummary, str]
    quantity: OrderQuantity
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    pickup: Optional[Pickup] = None
    chat: List[ChatMessage] = Field(default_factory=list)
    rating: Rating = Field(default_factory=Rating)

    @model_validator(mode="before")
    @classmethod
    def default_rating(cls, data):
        # documents written without a rating carry null
        if isinstance(data, dict) and data.get("rating") is None:
            data = {**data, "rating": {}}
        return data


class OrderEnvelope(APIModel):
    message: str
    order: Order


class ChatEnvelope(APIModel):
    message: str
    chat: List[ChatMessage]
