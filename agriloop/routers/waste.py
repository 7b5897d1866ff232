"""
Waste listing router.

Provides REST API endpoints for:
- Creating listings (farmers, multipart with images)
- Public search with type, condition, price and radius filters
- Listing detail (counts a view)
- Owner-only update and delete
- Filename-based waste type suggestion
"""

import structlog
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from agriloop.config import get_settings
from agriloop.dependencies import get_listing_service, get_page_request, require_farmer
from agriloop.models.auth import CurrentUser
from agriloop.models.common import MessageResponse, error_responses
from agriloop.models.waste import (
    ClassificationResult,
    Condition,
    ListingEnvelope,
    ListingFilters,
    ListingPage,
    WasteListing,
    WasteListingCreate,
    WasteListingUpdate,
    WasteType,
)
from agriloop.routers.forms import parse_json_field, read_uploads, validate_form
from agriloop.services.classifier import classify_waste
from agriloop.services.listing_service import ListingService
from agriloop.services.pagination import PageRequest

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/waste",
    tags=["Waste Listings"],
)


def get_listing_filters(
    waste_type: Optional[WasteType] = Query(None, alias="wasteType"),
    condition: Optional[Condition] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="Search radius in km"),
) -> ListingFilters:
    return ListingFilters(
        waste_type=waste_type,
        condition=condition,
        min_price=min_price,
        max_price=max_price,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius if radius is not None else get_settings().search_default_radius_km,
    )


@router.post(
    "",
    response_model=ListingEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="""
    Multipart form. ``quantity``, ``price``, ``location`` and the optional
    ``specifications`` are JSON strings. When ``wasteType`` is omitted it is
    suggested from the first image filename.

    **Authentication:** farmer role

    **Error Responses:**
    - 400: Malformed JSON, invalid fields, too many or too large images
    - 403: Caller is not a farmer
    """,
    responses=error_responses(400, 401, 403),
)
async def create_listing(
    title: str = Form(...),
    description: str = Form(...),
    condition: str = Form(...),
    quantity: str = Form(...),
    price: str = Form(...),
    location: str = Form(...),
    waste_type: Optional[str] = Form(None, alias="wasteType"),
    specifications: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    farmer: CurrentUser = Depends(require_farmer),
    listing_service: ListingService = Depends(get_listing_service),
):
    data = validate_form(WasteListingCreate, {
        "title": title,
        "description": description,
        "waste_type": waste_type or None,
        "condition": condition,
        "quantity": parse_json_field("quantity", quantity),
        "price": parse_json_field("price", price),
        "location": parse_json_field("location", location),
        "specifications": parse_json_field("specifications", specifications, {}),
    })

    listing = await listing_service.create_listing(farmer, data, await read_uploads(images))
    return {"message": "Waste listing created successfully", "listing": listing}


@router.get(
    "",
    response_model=ListingPage,
    summary="Search listings",
    description="""
    Available listings, newest first. The radius filter (km, default 50)
    applies only when both ``latitude`` and ``longitude`` are given.
    """,
)
async def search_listings(
    filters: ListingFilters = Depends(get_listing_filters),
    page: PageRequest = Depends(get_page_request),
    listing_service: ListingService = Depends(get_listing_service),
):
    listings, pagination = await listing_service.search(filters, page)
    return {"listings": listings, "pagination": pagination}


@router.get(
    "/my-listings",
    response_model=List[WasteListing],
    summary="Own listings",
    responses=error_responses(401, 403),
)
async def my_listings(
    farmer: CurrentUser = Depends(require_farmer),
    listing_service: ListingService = Depends(get_listing_service),
):
    return await listing_service.my_listings(farmer.id)


@router.get(
    "/classify",
    response_model=ClassificationResult,
    summary="Suggest waste type",
)
async def classify(filename: str = Query(..., min_length=1)):
    return classify_waste(filename)


@router.get(
    "/{listing_id}",
    response_model=WasteListing,
    summary="Listing detail",
    responses=error_responses(404),
)
async def get_listing(
    listing_id: str,
    listing_service: ListingService = Depends(get_listing_service),
):
    return await listing_service.view_listing(listing_id)


@router.put(
    "/{listing_id}",
    response_model=ListingEnvelope,
    summary="Update listing",
    description="Partial update. Listings owned by other farmers report 404.",
    responses=error_responses(401, 403, 404),
)
async def update_listing(
    listing_id: str,
    update: WasteListingUpdate,
    farmer: CurrentUser = Depends(require_farmer),
    listing_service: ListingService = Depends(get_listing_service),
):
    listing = await listing_service.update_listing(listing_id, farmer, update)
    return {"message": "Listing updated successfully", "listing": listing}


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Delete listing",
    responses=error_responses(401, 403, 404),
)
async def delete_listing(
    listing_id: str,
    farmer: CurrentUser = Depends(require_farmer),
    listing_service: ListingService = Depends(get_listing_service),
):
    await listing_service.delete_listing(listing_id, farmer)
    logger.info("listing_delete_requested", listing_id=listing_id, farmer_id=farmer.id)
    return {"message": "Listing deleted successfully"}
