"""
Unit tests for the farmer dashboard.
"""

from agriloop.models.order import OrderStatus
from agriloop.services.dashboard_service import DashboardService, compute_farmer_stats
from agriloop.services.listing_service import ListingService
from agriloop.services.order_service import OrderService


def listing(status: str, views: int) -> dict:
    return {"availability": {"status": status}, "views": views}


def order(status: str, amount: float) -> dict:
    return {"status": status, "total_amount": amount}


class TestComputeFarmerStats:

    def test_empty(self):
        assert compute_farmer_stats([], []) == {
            "total_listings": 0,
            "active_listings": 0,
            "total_views": 0,
            "total_orders": 0,
            "total_earnings": 0,
            "pending_earnings": 0,
        }

    def test_totals(self):
        listings = [listing("available", 10), listing("booked", 3), listing("sold", 7), listing("available", 0)]
        orders = [
            order("completed", 300),
            order("completed", 120),
            order("confirmed", 50),
            order("picked_up", 25),
            order("pending", 999),
            order("cancelled", 999),
        ]

        stats = compute_farmer_stats(listings, orders)

        assert stats["total_listings"] == 4
        assert stats["active_listings"] == 2
        assert stats["total_views"] == 20
        assert stats["total_orders"] == 6
        assert stats["total_earnings"] == 420
        assert stats["pending_earnings"] == 75


class TestFarmerDashboard:

    async def test_recent_items_are_newest_first_and_capped(
        self, listing_repo, order_repo, user_repo, farmer, creator
    ):
        listing_ids = []
        for i in range(6):
            created = await listing_repo.create_listing(farmer.id, {
                "title": f"Lot {i}",
                "description": "Straw",
                "waste_type": "wheat_straw",
                "quantity": {"amount": 1, "unit": "bundles"},
                "condition": "raw",
                "price": {"amount": 7},
                "location": {
                    "address": "Ludhiana, Punjab",
                    "coordinates": {"latitude": 30.9, "longitude": 75.85},
                },
            })
            listing_ids.append(created["id"])

        order_service = OrderService(order_repo, listing_repo, user_repo)
        listing_service = ListingService(listing_repo, user_repo)
        for listing_id in listing_ids[:4]:
            await order_repo.create_order(
                order_repo.new_id(), listing_id, farmer.id, creator.id,
                {"quantity": {"amount": 1, "unit": "bundles"}, "total_amount": 7},
            )
        placed = await order_repo.list_for("farmer", farmer.id)
        await order_repo.update_order(placed[0]["id"], {"status": OrderStatus.COMPLETED})

        dashboard = await DashboardService(listing_service, order_service).farmer_dashboard(farmer)

        assert [item["title"] for item in dashboard["recent_listings"]] == ["Lot 5", "Lot 4", "Lot 3", "Lot 2"]
        assert len(dashboard["recent_orders"]) == 3
        assert dashboard["recent_orders"][0]["waste_listing"]["title"] == "Lot 3"
        assert dashboard["recent_orders"][0]["creator"]["name"] == creator.name
        assert dashboard["stats"]["total_listings"] == 6
        assert dashboard["stats"]["total_orders"] == 4
        assert dashboard["stats"]["total_earnings"] == 7
