"""
Multipart form helpers.

Listing and showcase forms carry their nested groups as JSON strings next
to the uploaded images. Decoding or validation problems are client errors
and surface as 400s rather than 422s.
"""

import json
from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import UploadFile
from pydantic import BaseModel, ValidationError

from agriloop.config import get_settings
from agriloop.errors import InvalidRequestError
from agriloop.services.media import UploadedImage, check_image_count, check_image_size

M = TypeVar("M", bound=BaseModel)

UPLOAD_CHUNK_SIZE = 64 * 1024


def parse_json_field(name: str, raw: Optional[str], default: Any = None) -> Any:
    """Decode a JSON-encoded form field; blank or missing gives ``default``."""
    if raw is None or not raw.strip():
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidRequestError(f"Invalid JSON in field '{name}'", {"error": str(e)})


def validate_form(model: Type[M], data: Dict[str, Any]) -> M:
    """Validate decoded form data against ``model``."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid form data",
            {"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        )


async def read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedImage]:
    """
    Measure each uploaded file. Parts without a filename are skipped.

    Files are read in chunks and reading stops as soon as one passes the
    size limit.

    Raises:
        InvalidRequestError: If there are too many files or one is too large
    """
    named = [upload for upload in files or [] if upload.filename]
    check_image_count(len(named))
    max_bytes = get_settings().upload_max_image_bytes

    uploads = []
    for upload in named:
        size = 0
        while size <= max_bytes:
            chunk = await upload.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
        image = UploadedImage(filename=upload.filename, size=size)
        check_image_size(image)
        uploads.append(image)
    return uploads
