"""
Farmer dashboard aggregation.

Stats are computed in Python from the farmer's listings and orders; a
farmer's catalogue is small enough that no aggregation pipeline is needed.
"""

from typing import Any, Dict, List

from agriloop.models.order import OrderStatus
from agriloop.models.waste import AvailabilityStatus
from agriloop.services.listing_service import ListingService
from agriloop.services.order_service import OrderService

RECENT_LISTINGS = 4
RECENT_ORDERS = 3

PENDING_STATUSES = {OrderStatus.CONFIRMED.value, OrderStatus.PICKED_UP.value}


def compute_farmer_stats(listings: List[Dict[str, Any]], orders: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Summarise a farmer's listings and orders."""
    return {
        "total_listings": len(listings),
        "active_listings": sum(
            1 for listing in listings
            if listing.get("availability", {}).get("status") == AvailabilityStatus.AVAILABLE.value
        ),
        "total_views": sum(listing.get("views", 0) for listing in listings),
        "total_orders": len(orders),
        "total_earnings": sum(
            order["total_amount"] for order in orders
            if order.get("status") == OrderStatus.COMPLETED.value
        ),
        "pending_earnings": sum(
            order["total_amount"] for order in orders
            if order.get("status") in PENDING_STATUSES
        ),
    }


class DashboardService:
    """Builds the farmer dashboard from the listing and order services."""

    def __init__(self, listing_service: ListingService, order_service: OrderService):
        self.listing_service = listing_service
        self.order_service = order_service

    async def farmer_dashboard(self, farmer) -> Dict[str, Any]:
        listings = await self.listing_service.my_listings(farmer.id)
        orders = await self.order_service.my_orders(farmer)

        # both lists arrive newest first
        return {
            "stats": compute_farmer_stats(listings, orders),
            "recent_listings": listings[:RECENT_LISTINGS],
            "recent_orders": orders[:RECENT_ORDERS],
        }
