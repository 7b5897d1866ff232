"""
Showcase models.

Creators publish what they made from purchased waste; other users like
and comment on it.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field

from agriloop.models.common import APIModel, Image, Pagination, TimestampedModel
from agriloop.models.user import UserSummary


class ShowcaseCategory(str, Enum):
    CRAFTS = "crafts"
    FURNITURE = "furniture"
    PACKAGING = "packaging"
    ART = "art"
    DECOR = "decor"
    OTHER = "other"


class MaterialUsed(APIModel):
    waste_type: Optional[str] = None
    quantity: Optional[str] = None
    source: Optional[str] = Field(None, description="Farm location or farmer name")


class Comment(APIModel):
    user: Union[UserSummary, str]
    message: str
    timestamp: datetime


class ShowcaseCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: ShowcaseCategory
    materials_used: List[MaterialUsed] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class Showcase(TimestampedModel):
    creator: Union[UserSummary, str]
    title: str
    description: str
    images: List[Image] = Field(default_factory=list)
    materials_used: List[MaterialUsed] = Field(default_factory=list)
    category: ShowcaseCategory
    tags: List[str] = Field(default_factory=list)
    likes: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    featured: bool = False


class ShowcaseEnvelope(APIModel):
    message: str
    showcase: Showcase


class ShowcasePage(APIModel):
    showcases: List[Showcase]
    pagination: Pagination


class LikeResponse(APIModel):
    likes: int = Field(..., ge=0)


class CommentRequest(APIModel):
    message: str = Field(..., min_length=1, max_length=2000)


class CommentsEnvelope(APIModel):
    message: str
    comments: List[Comment]
