"""
Showcase service.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from agriloop.errors import NotFoundError
from agriloop.models.auth import CurrentUser
from agriloop.models.common import Pagination
from agriloop.models.showcase import ShowcaseCategory, ShowcaseCreate
from agriloop.repositories.showcase_repo import ShowcaseRepository
from agriloop.repositories.user_repo import UserRepository
from agriloop.services.media import SHOWCASE_IMAGE_SIZE, UploadedImage, store_images
from agriloop.services.pagination import PageRequest
from agriloop.services.populate import populate_users
from agriloop_shared.metrics import get_marketplace_metrics
from agriloop_shared.tracing import trace_function

logger = structlog.get_logger(__name__)


class ShowcaseService:
    """Service for creator showcases."""

    def __init__(self, showcase_repo: ShowcaseRepository, user_repo: UserRepository):
        self.showcase_repo = showcase_repo
        self.user_repo = user_repo

    async def _populated(self, showcases: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await populate_users(
            self.user_repo,
            showcases,
            fields=("creator",),
            nested=("comments.user",),
        )

    @trace_function("showcases.create")
    async def create_showcase(
        self,
        creator: CurrentUser,
        data: ShowcaseCreate,
        images: Sequence[UploadedImage] = (),
    ) -> Dict[str, Any]:
        """
        Publish a showcase for ``creator``.

        Raises:
            InvalidRequestError: If the images break the upload limits
        """
        fields = data.model_dump()
        fields["images"] = store_images(images, "showcase", SHOWCASE_IMAGE_SIZE)

        showcase = await self.showcase_repo.create_showcase(creator.id, fields)
        get_marketplace_metrics().showcases_created.labels(category=data.category.value).inc()

        (showcase,) = await self._populated([showcase])
        return showcase

    async def list_showcases(
        self,
        category: Optional[ShowcaseCategory],
        page: PageRequest,
    ) -> Tuple[List[Dict[str, Any]], Pagination]:
        query: Dict[str, Any] = {}
        if category is not None:
            query["category"] = category.value

        showcases = await self.showcase_repo.search(query, skip=page.skip, limit=page.limit)
        total = await self.showcase_repo.count(query)
        return await self._populated(showcases), page.paginate(total)

    async def my_showcases(self, creator_id: str) -> List[Dict[str, Any]]:
        return await self.showcase_repo.list_by_creator(creator_id)

    async def get_showcase(self, showcase_id: str) -> Dict[str, Any]:
        showcase = await self.showcase_repo.get_showcase(showcase_id)
        if not showcase:
            raise NotFoundError("Showcase", showcase_id)
        (showcase,) = await self._populated([showcase])
        return showcase

    async def toggle_like(self, showcase_id: str, user: CurrentUser) -> int:
        """
        Like or unlike a showcase.

        Returns:
            The like count afterwards
        """
        likes = await self.showcase_repo.toggle_like(showcase_id, user.id)
        if likes is None:
            raise NotFoundError("Showcase", showcase_id)
        return likes

    async def add_comment(self, showcase_id: str, user: CurrentUser, message: str) -> List[Dict[str, Any]]:
        showcase = await self.showcase_repo.add_comment(showcase_id, user.id, message)
        if not showcase:
            raise NotFoundError("Showcase", showcase_id)

        logger.info("showcase_commented", showcase_id=showcase_id, user_id=user.id)
        await populate_users(self.user_repo, [showcase], nested=("comments.user",))
        return showcase["comments"]
