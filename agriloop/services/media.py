"""
Image upload handling.

Images are not persisted anywhere; each accepted upload is recorded as a
placeholder URL carrying the original filename, plus a generated public id.
"""

import random
import string
import time
from typing import List, NamedTuple, Sequence
from urllib.parse import quote

import structlog

from agriloop.config import get_settings
from agriloop.errors import InvalidRequestError

logger = structlog.get_logger(__name__)

WASTE_IMAGE_SIZE = "400x300"
SHOWCASE_IMAGE_SIZE = "600x400"

_ID_ALPHABET = string.ascii_lowercase + string.digits


class UploadedImage(NamedTuple):
    """An uploaded file as received: its client filename and byte size."""
    filename: str
    size: int


def check_image_count(count: int) -> None:
    max_images = get_settings().upload_max_images
    if count > max_images:
        raise InvalidRequestError(f"At most {max_images} images are allowed", {"received": count})


def check_image_size(image: UploadedImage) -> None:
    max_bytes = get_settings().upload_max_image_bytes
    if image.size > max_bytes:
        raise InvalidRequestError(
            f"Image '{image.filename}' exceeds {max_bytes} bytes",
            {"size": image.size},
        )


def validate_uploads(images: Sequence[UploadedImage]) -> None:
    """
    Enforce the per-request image count and per-file size limits.

    Raises:
        InvalidRequestError: If either limit is exceeded
    """
    check_image_count(len(images))
    for image in images:
        check_image_size(image)


def _public_id(prefix: str) -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def store_images(images: Sequence[UploadedImage], prefix: str, dimensions: str) -> List[dict]:
    """
    Validate uploads and record them as placeholder images.

    Args:
        images: Uploaded files
        prefix: Public id prefix ("waste" or "showcase")
        dimensions: Placeholder size, e.g. "400x300"

    Returns:
        ``{"url", "public_id"}`` dicts in upload order
    """
    validate_uploads(images)
    host = get_settings().upload_placeholder_host.rstrip("/")

    stored = [
        {
            "url": f"{host}/{dimensions}?text={quote(image.filename, safe='')}",
            "public_id": _public_id(prefix),
        }
        for image in images
    ]
    if stored:
        logger.info("images_stored", prefix=prefix, count=len(stored))
    return stored
