"""
Common Pydantic models shared across resources.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """
    Base for every API-facing model.

    Fields are declared snake_case and exposed camelCase. Both spellings
    are accepted on input so repository dicts validate directly.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Coordinates(APIModel):
    """Latitude/longitude pair in decimal degrees."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Image(APIModel):
    """Stored image reference."""
    url: str
    public_id: str


class Pagination(APIModel):
    """Page metadata returned by list endpoints."""
    current: int = Field(..., ge=1, description="Current page (1-based)")
    pages: int = Field(..., ge=0, description="Total number of pages")
    total: int = Field(..., ge=0, description="Total matching documents")


class MessageResponse(APIModel):
    """Plain acknowledgement."""
    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""
    message: str = Field(
        ...,
        min_length=1,
        description="Error message"
    )
    error: Optional[str] = Field(
        None,
        description="Underlying error text (server errors only)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "Listing not found"
            }
        }
    }


class TimestampedModel(APIModel):
    """Adds the document id and audit timestamps."""
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def error_responses(*codes: int) -> dict:
    """OpenAPI ``responses`` mapping for the given error status codes."""
    descriptions = {
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
    }
    return {code: {"model": ErrorResponse, "description": descriptions.get(code, "Error")} for code in codes}
