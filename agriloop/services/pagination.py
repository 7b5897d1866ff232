"""Page arithmetic shared by the list endpoints."""

import math
from dataclasses import dataclass

from agriloop.models.common import Pagination

# skip is sent to MongoDB as an int64
MAX_PAGE = 1_000_000


@dataclass(frozen=True)
class PageRequest:
    """A clamped page/limit pair."""

    page: int
    limit: int

    @classmethod
    def create(cls, page: int, limit: int, max_limit: int) -> "PageRequest":
        """Clamp page to [1, MAX_PAGE] and limit to [1, max_limit]."""
        return cls(page=min(max(1, page), MAX_PAGE), limit=min(max(1, limit), max_limit))

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def paginate(self, total: int) -> Pagination:
        return Pagination(
            current=self.page,
            pages=math.ceil(total / self.limit) if total else 0,
            total=total,
        )
