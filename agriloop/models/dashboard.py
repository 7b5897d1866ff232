"""Farmer dashboard models."""

from typing import List

from pydantic import Field

from agriloop.models.common import APIModel
from agriloop.models.order import Order
from agriloop.models.waste import WasteListing


class FarmerStats(APIModel):
    total_listings: int = Field(..., ge=0)
    active_listings: int = Field(..., ge=0)
    total_views: int = Field(..., ge=0)
    total_orders: int = Field(..., ge=0)
    total_earnings: float = Field(..., ge=0, description="Sum over completed orders")
    pending_earnings: float = Field(..., ge=0, description="Sum over confirmed and picked-up orders")


class FarmerDashboard(APIModel):
    stats: FarmerStats
    recent_listings: List[WasteListing]
    recent_orders: List[Order]
