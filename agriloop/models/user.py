"""
User models.

Covers the two marketplace roles, profile sub-documents and the user
shapes the API returns (full record for the owner, summaries for
populated references).
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from agriloop.models.common import APIModel, Coordinates, TimestampedModel


class Role(str, Enum):
    """
    Marketplace roles.

    - FARMER: lists agricultural waste for sale
    - CREATOR: buys waste and publishes showcases
    """
    FARMER = "farmer"
    CREATOR = "creator"


class UserLocation(APIModel):
    """Where a user is based."""
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class Profile(APIModel):
    """Optional public profile details."""
    avatar: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=1000)
    specialization: Optional[str] = Field(
        None,
        description="For creators: crafts, furniture, packaging, etc."
    )
    experience: Optional[float] = Field(None, ge=0, description="Years of experience")


class Earnings(APIModel):
    """Running totals of a farmer's income."""
    total: float = 0
    pending: float = 0
    withdrawn: float = 0


class UserResponse(TimestampedModel):
    """The caller's own user record. Never carries the password hash."""
    name: str
    email: str
    role: Role
    phone: str
    location: Optional[UserLocation] = None
    profile: Optional[Profile] = None
    earnings: Earnings = Field(default_factory=Earnings)
    eco_credits: float = 0
    is_verified: bool = False


class PublicUser(APIModel):
    """What anyone may see about another user."""
    id: str
    name: str
    role: Role
    location: Optional[UserLocation] = None
    profile: Optional[Profile] = None
    is_verified: bool = False


class UserSummary(APIModel):
    """Populated reference embedded in listings, orders and showcases."""
    id: str
    name: str
    phone: Optional[str] = None
    location: Optional[UserLocation] = None
    profile: Optional[Profile] = None


class UpdateProfileRequest(APIModel):
    """Partial update of the caller's own profile."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=5, max_length=20)
    location: Optional[UserLocation] = None
    profile: Optional[Profile] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "phone": "+919876543210",
                "profile": {"bio": "Third-generation coconut grower"}
            }
        }
    }
