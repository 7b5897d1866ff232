"""
FastAPI dependency injection for database, authentication, and authorization.

Provides injectable dependencies for:
- The MongoDB database handle
- User authentication (JWT token validation)
- Authorization (farmer/creator role checks)
- Repository and service instances
- Pagination parameters

Every repository dependency hangs off ``get_db`` so tests can swap the
whole data layer through ``app.dependency_overrides``.
"""

import structlog
from typing import Optional
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pymongo.asynchronous.database import AsyncDatabase

from agriloop.config import get_settings
from agriloop.database import get_database
from agriloop.models.auth import CurrentUser
from agriloop.models.user import Role
from agriloop.repositories.order_repo import OrderRepository
from agriloop.repositories.showcase_repo import ShowcaseRepository
from agriloop.repositories.user_repo import UserRepository
from agriloop.repositories.waste_repo import WasteListingRepository
from agriloop.services.auth_service import AuthService
from agriloop.services.dashboard_service import DashboardService
from agriloop.services.listing_service import ListingService
from agriloop.services.order_service import OrderService
from agriloop.services.pagination import PageRequest
from agriloop.services.showcase_service import ShowcaseService

logger = structlog.get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


# ============================================================================
# DATABASE
# ============================================================================


def get_db() -> AsyncDatabase:
    """
    Get the application database.

    Raises:
        RuntimeError: If the client was not initialized at startup
    """
    return get_database()


# ============================================================================
# REPOSITORY DEPENDENCIES
# ============================================================================


def get_user_repository(db: AsyncDatabase = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_listing_repository(db: AsyncDatabase = Depends(get_db)) -> WasteListingRepository:
    return WasteListingRepository(db)


def get_order_repository(db: AsyncDatabase = Depends(get_db)) -> OrderRepository:
    return OrderRepository(db)


def get_showcase_repository(db: AsyncDatabase = Depends(get_db)) -> ShowcaseRepository:
    return ShowcaseRepository(db)


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository)
) -> AuthService:
    """
    Get authentication service instance.

    Args:
        user_repo: User repository

    Returns:
        Authentication service
    """
    return AuthService(user_repo)


def get_listing_service(
    listing_repo: WasteListingRepository = Depends(get_listing_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> ListingService:
    return ListingService(listing_repo, user_repo)


def get_order_service(
    order_repo: OrderRepository = Depends(get_order_repository),
    listing_repo: WasteListingRepository = Depends(get_listing_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> OrderService:
    return OrderService(order_repo, listing_repo, user_repo)


def get_showcase_service(
    showcase_repo: ShowcaseRepository = Depends(get_showcase_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> ShowcaseService:
    return ShowcaseService(showcase_repo, user_repo)


def get_dashboard_service(
    listing_service: ListingService = Depends(get_listing_service),
    order_service: OrderService = Depends(get_order_service),
) -> DashboardService:
    return DashboardService(listing_service, order_service)


# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


async def get_token_from_header(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Extract JWT token from Authorization header.

    Args:
        credentials: HTTP bearer credentials

    Returns:
        JWT token string

    Raises:
        HTTPException: If token is missing
    """
    if not credentials:
        logger.warning("auth_missing_credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token_from_header),
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    """
    Get current authenticated user from JWT token.

    Validates token and retrieves user from database.

    Args:
        token: JWT token
        auth_service: Authentication service

    Returns:
        Current authenticated user

    Raises:
        HTTPException: If token is invalid or user not found

    Example:
        @router.get("/me")
        async def me(user: CurrentUser = Depends(get_current_user)):
            return {"id": user.id, "role": user.role}
    """
    current_user = await auth_service.get_current_user(token)

    if not current_user:
        logger.warning("auth_invalid_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    logger.debug(
        "user_authenticated",
        user_id=current_user.id,
        role=current_user.role.value
    )

    return current_user


# ============================================================================
# AUTHORIZATION DEPENDENCIES (ROLE-BASED)
# ============================================================================


def require_role(role: Role):
    """
    Build a dependency that admits only users with ``role``.

    Example:
        @router.post("/waste")
        async def create(user: CurrentUser = Depends(require_role(Role.FARMER))):
            ...
    """

    async def dependency(
        current_user: CurrentUser = Depends(get_current_user)
    ) -> CurrentUser:
        if not current_user.has_role(role):
            logger.warning(
                f"access_denied_{role.value}_required",
                user_id=current_user.id,
                role=current_user.role.value
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied: {role.value} role required"
            )
        return current_user

    dependency.__name__ = f"require_{role.value}"
    return dependency


require_farmer = require_role(Role.FARMER)
require_creator = require_role(Role.CREATOR)


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


def get_page_request(
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Items per page"),
) -> PageRequest:
    """
    Pagination parameters, clamped.

    Out-of-range values are pulled into range rather than rejected.
    """
    settings = get_settings()
    return PageRequest.create(
        page=page,
        limit=settings.pagination_default_limit if limit is None else limit,
        max_limit=settings.pagination_max_limit,
    )


def get_client_ip(request: Request) -> Optional[str]:
    """
    Get client IP address from request.

    Checks X-Forwarded-For header first (for proxied requests),
    then falls back to direct client address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return None
