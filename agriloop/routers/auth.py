"""
Authentication router.

Provides REST API endpoints for:
- Registration of farmers and creators
- Login (JWT issuance)
- The caller's own record
"""

import structlog
from fastapi import APIRouter, Depends, status

from agriloop.dependencies import get_auth_service, get_current_user, get_user_repository
from agriloop.errors import NotFoundError
from agriloop.models.auth import AuthResponse, CurrentUser, LoginRequest, RegisterRequest
from agriloop.models.common import error_responses
from agriloop.models.user import UserResponse
from agriloop.repositories.user_repo import UserRepository
from agriloop.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="""
    Create a farmer or creator account and return a JWT.

    **Authentication:** Not required (public endpoint)

    **Error Responses:**
    - 400: Email already registered
    - 422: Validation error
    """,
    responses=error_responses(400),
)
async def register(
    register_request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    token, user = await auth_service.register(register_request)
    return {"message": "User registered successfully", "token": token, "user": user}


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="""
    Authenticate with email and password.

    **Authentication:** Not required (public endpoint)

    **Error Responses:**
    - 401: Invalid credentials
    """,
    responses=error_responses(401),
)
async def login(
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    token, user = await auth_service.login(login_request)
    return {"message": "Login successful", "token": token, "user": user}


async def load_own_record(current_user: CurrentUser, user_repo: UserRepository) -> dict:
    """Fetch the caller's full record. Shared with ``GET /users/me``."""
    user = await user_repo.get_user_by_id(current_user.id)
    if not user:
        raise NotFoundError("User", current_user.id)
    return user


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
    responses=error_responses(401),
)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return await load_own_record(current_user, user_repo)
