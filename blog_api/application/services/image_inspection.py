"""Image content sniffing for uploaded files."""

import io

from PIL import Image, UnidentifiedImageError

# Pillow format name → stored file extension
ALLOWED_IMAGE_FORMATS: dict[str, str] = {
    "JPEG": "jpg",
    "MPO": "jpg",  # multi-picture JPEG written by many cameras
    "PNG": "png",
    "BMP": "bmp",
}
ALLOWED_IMAGE_TYPES = ("jpeg", "jpg", "png", "bmp")


def detect_image_format(content: bytes) -> str | None:
    """Return Pillow's format name for *content*, or None if it is not a readable image."""
    if not content:
        return None
    try:
        with Image.open(io.BytesIO(content)) as image:
            image.verify()
            return image.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        return None
