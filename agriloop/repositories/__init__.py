"""MongoDB repositories, one per collection."""

from agriloop.repositories.order_repo import OrderRepository
from agriloop.repositories.showcase_repo import ShowcaseRepository
from agriloop.repositories.user_repo import UserRepository
from agriloop.repositories.waste_repo import WasteListingRepository

__all__ = [
    "OrderRepository",
    "ShowcaseRepository",
    "UserRepository",
    "WasteListingRepository",
]
