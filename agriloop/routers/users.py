"""
User profile router.
"""

import structlog
from fastapi import APIRouter, Depends

from agriloop.dependencies import get_current_user, get_user_repository
from agriloop.errors import NotFoundError
from agriloop.models.auth import CurrentUser
from agriloop.models.common import error_responses
from agriloop.models.user import PublicUser, UpdateProfileRequest, UserResponse
from agriloop.repositories.base import flatten_for_set
from agriloop.repositories.user_repo import UserRepository
from agriloop.routers.auth import load_own_record

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Own profile",
    responses=error_responses(401),
)
async def get_my_profile(
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return await load_own_record(current_user, user_repo)


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Update own profile",
    description="""
    Partial update of name, phone, location and profile. Nested groups are
    merged: sending ``profile.bio`` keeps the other profile fields.
    """,
    responses=error_responses(401),
)
async def update_my_profile(
    update: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
):
    fields = flatten_for_set("", update.model_dump(exclude_unset=True, exclude_none=True))
    if not fields:
        return await load_own_record(current_user, user_repo)

    user = await user_repo.update_user(current_user.id, fields)
    if not user:
        raise NotFoundError("User", current_user.id)
    return user


@router.get(
    "/{user_id}",
    response_model=PublicUser,
    summary="Public profile",
    responses=error_responses(404),
)
async def get_public_profile(
    user_id: str,
    user_repo: UserRepository = Depends(get_user_repository),
):
    user = await user_repo.get_user_by_id(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user
