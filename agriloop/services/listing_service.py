"""
Waste listing service.

Owns the listing lifecycle seen by farmers (create, update, delete) and
the public search and detail views.
"""

from typing import Any, Dict, List, Sequence, Tuple

import structlog

from agriloop.errors import NotFoundError
from agriloop.models.auth import CurrentUser
from agriloop.models.common import Pagination
from agriloop.models.waste import ListingFilters, WasteListingCreate, WasteListingUpdate, WasteType
from agriloop.repositories.user_repo import UserRepository
from agriloop.repositories.waste_repo import WasteListingRepository, build_listing_filter
from agriloop.services.classifier import classify_waste
from agriloop.services.media import WASTE_IMAGE_SIZE, UploadedImage, store_images
from agriloop.services.pagination import PageRequest
from agriloop.services.populate import populate_users
from agriloop_shared.metrics import get_marketplace_metrics
from agriloop_shared.tracing import trace_function

logger = structlog.get_logger(__name__)


class ListingService:
    """Service for waste listing operations."""

    def __init__(self, listing_repo: WasteListingRepository, user_repo: UserRepository):
        self.listing_repo = listing_repo
        self.user_repo = user_repo

    async def _populated(self, listings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await populate_users(self.user_repo, listings, fields=("farmer",))

    @trace_function("listings.create")
    async def create_listing(
        self,
        farmer: CurrentUser,
        data: WasteListingCreate,
        images: Sequence[UploadedImage] = (),
    ) -> Dict[str, Any]:
        """
        Create a listing for ``farmer``.

        When no waste type is given it is classified from the first image's
        filename, or set to ``other`` when there are no images.

        Raises:
            InvalidRequestError: If the images break the upload limits
        """
        stored = store_images(images, "waste", WASTE_IMAGE_SIZE)

        waste_type = data.waste_type
        if waste_type is None:
            waste_type = classify_waste(images[0].filename).waste_type if images else WasteType.OTHER

        fields = data.model_dump(exclude={"waste_type"})
        fields["waste_type"] = waste_type
        fields["images"] = stored

        listing = await self.listing_repo.create_listing(farmer.id, fields)
        get_marketplace_metrics().listings_created.labels(waste_type=waste_type.value).inc()

        (listing,) = await self._populated([listing])
        return listing

    @trace_function("listings.search")
    async def search(self, filters: ListingFilters, page: PageRequest) -> Tuple[List[Dict[str, Any]], Pagination]:
        """Available listings matching ``filters``, newest first, one page."""
        query = build_listing_filter(filters)
        listings = await self.listing_repo.search(query, skip=page.skip, limit=page.limit)
        total = await self.listing_repo.count(query)

        logger.debug("listings_searched", total=total, page=page.page, limit=page.limit)
        return await self._populated(listings), page.paginate(total)

    async def my_listings(self, farmer_id: str) -> List[Dict[str, Any]]:
        return await self.listing_repo.list_by_farmer(farmer_id)

    async def view_listing(self, listing_id: str) -> Dict[str, Any]:
        """
        Return a listing and count the view.

        Raises:
            NotFoundError: If the listing does not exist
        """
        listing = await self.listing_repo.increment_views(listing_id)
        if not listing:
            raise NotFoundError("Listing", listing_id)
        (listing,) = await self._populated([listing])
        return listing

    async def update_listing(
        self,
        listing_id: str,
        farmer: CurrentUser,
        data: WasteListingUpdate,
    ) -> Dict[str, Any]:
        """
        Apply a partial update to one of the farmer's own listings.

        Raises:
            NotFoundError: If the listing does not exist or belongs to someone else
        """
        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        listing = await self.listing_repo.update_listing(listing_id, farmer.id, fields)
        if not listing:
            raise NotFoundError("Listing", listing_id)
        return listing

    async def delete_listing(self, listing_id: str, farmer: CurrentUser) -> None:
        """
        Raises:
            NotFoundError: If the listing does not exist or belongs to someone else
        """
        if not await self.listing_repo.delete_listing(listing_id, farmer.id):
            raise NotFoundError("Listing", listing_id)
