"""
Dashboard router.
"""

from fastapi import APIRouter, Depends

from agriloop.dependencies import get_dashboard_service, require_farmer
from agriloop.models.auth import CurrentUser
from agriloop.models.common import error_responses
from agriloop.models.dashboard import FarmerDashboard
from agriloop.services.dashboard_service import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "/farmer",
    response_model=FarmerDashboard,
    summary="Farmer dashboard",
    description="Listing and order stats plus the newest 4 listings and 3 orders.",
    responses=error_responses(401, 403),
)
async def farmer_dashboard(
    farmer: CurrentUser = Depends(require_farmer),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard_service.farmer_dashboard(farmer)
