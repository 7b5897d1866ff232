"""
Showcase router.
"""

import structlog
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from agriloop.dependencies import get_current_user, get_page_request, get_showcase_service, require_creator
from agriloop.models.auth import CurrentUser
from agriloop.models.common import error_responses
from agriloop.models.showcase import (
    CommentRequest,
    CommentsEnvelope,
    LikeResponse,
    Showcase,
    ShowcaseCategory,
    ShowcaseCreate,
    ShowcaseEnvelope,
    ShowcasePage,
)
from agriloop.routers.forms import parse_json_field, read_uploads, validate_form
from agriloop.services.pagination import PageRequest
from agriloop.services.showcase_service import ShowcaseService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/showcase",
    tags=["Showcase"],
)


@router.post(
    "",
    response_model=ShowcaseEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Publish showcase",
    description="""
    Multipart form. ``materialsUsed`` and ``tags`` are JSON arrays.

    **Authentication:** creator role
    """,
    responses=error_responses(400, 401, 403),
)
async def create_showcase(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    materials_used: Optional[str] = Form(None, alias="materialsUsed"),
    tags: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    creator: CurrentUser = Depends(require_creator),
    showcase_service: ShowcaseService = Depends(get_showcase_service),
):
    data = validate_form(ShowcaseCreate, {
        "title": title,
        "description": description,
        "category": category,
        "materials_used": parse_json_field("materialsUsed", materials_used, []),
        "tags": parse_json_field("tags", tags, []),
    })

    showcase = await showcase_service.create_showcase(creator, data, await read_uploads(images))
    return {"message": "Showcase created successfully", "showcase": showcase}


@router.get(
    "",
    response_model=ShowcasePage,
    summary="Browse showcases",
)
async def list_showcases(
    category: Optional[ShowcaseCategory] = Query(None),
    page: PageRequest = Depends(get_page_request),
    showcase_service: ShowcaseService = Depends(get_showcase_service),
):
    showcases, pagination = await showcase_service.list_showcases(category, page)
    return {"showcases": showcases, "pagination": pagination}


@router.get(
    "/my-showcases",
    response_model=List[Showcase],
    summary="Own showcases",
    responses=error_responses(401, 403),
)
async def my_showcases(
    creator: CurrentUser = Depends(require_creator),
    showcase_service: ShowcaseService = Depends(get_showcase_service),
):
    return await showcase_service.my_showcases(creator.id)


@router.get(
    "/{showcase_id}",
    response_model=Showcase,
    summary="Showcase detail",
    responses=error_responses(404),
)
async def get_showcase(
    showcase_id: str,
    showcase_service: ShowcaseService = Depends(get_showcase_service),
):
    return await showcase_service.get_showcase(showcase_id)


@router.post(
    "/{showcase_id}/like",
    response_model=LikeResponse,
    summary="Like or unlike",
    responses=error_responses(401, 404),
)
async def toggle_like(
    showcase_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    showcase_service: ShowcaseService = Depends(get_showcase_service),
):
    likes = await showcase_service.toggle_like(showcase_id, current_user)
    return {"likes": likes}


@router.post(
    "/{showcase_id}/comments",
    response_model=CommentsEnvelope,
    summary="Comment",
    responses=error_responses(401, 404),
)
async def add_comment(
    showcase_id: str,
    comment_request: CommentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    showcase_service: ShowcaseService = Depends(get_showcase_service),
):
    comments = await showcase_service.add_comment(showcase_id, current_user, comment_request.message)
    return {"message": "Comment added", "comments": comments}
