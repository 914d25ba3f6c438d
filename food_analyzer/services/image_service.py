"""
Image intake service - validate uploads, download by URL, encode for the AI.
"""
import io
import base64

import httpx
from PIL import Image, UnidentifiedImageError

from food_analyzer.core.config import settings
from food_analyzer.core.errors import InvalidImageError
from food_analyzer.core.logger import logger


# Formats the vision model accepts as-is; anything else is re-encoded as JPEG
SUPPORTED_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}


def image_to_base64(image_bytes: bytes) -> str:
    """
    Convert single image bytes to base64 string.

    Args:
        image_bytes: Image content

    Returns:
        Base64 encoded string
    """
    return base64.b64encode(image_bytes).decode()


def _to_jpeg(image_bytes: bytes) -> bytes:
    with Image.open(io.BytesIO(image_bytes)) as img:
        buf = io.BytesIO()
        img.convert("RGB").save(buf, format="JPEG", quality=90)
        return buf.getvalue()


def load_image(image_bytes: bytes) -> tuple[str, str]:
    """
    Validate raw image data and prepare it for the vision model.

    Args:
        image_bytes: Uploaded or downloaded file content

    Returns:
        (base64 data, MIME type)

    Raises:
        InvalidImageError: If the data is empty, too large, too many pixels or not an image
    """
    if not image_bytes:
        raise InvalidImageError("No image data received.")

    if len(image_bytes) > settings.MAX_IMAGE_BYTES:
        limit_mb = settings.MAX_IMAGE_BYTES // (1024 * 1024)
        raise InvalidImageError(f"Image too large: exceeds {limit_mb}MB limit.")

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            image_format = img.format
            width, height = img.size
            img.verify()
    except Image.DecompressionBombError as e:
        raise InvalidImageError("Image dimensions too large.") from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidImageError("File is not a supported image.") from e

    # Header-declared size; checked before anything decodes the bitmap
    if width * height > settings.MAX_IMAGE_PIXELS:
        raise InvalidImageError(
            f"Image dimensions too large: {width}x{height} exceeds {settings.MAX_IMAGE_PIXELS} pixels."
        )

    if image_format not in SUPPORTED_FORMATS:
        logger.info(f"Re-encoding {image_format} image as JPEG")
        try:
            image_bytes = _to_jpeg(image_bytes)
        except (OSError, ValueError) as e:
            raise InvalidImageError("File is not a supported image.") from e
        image_format = "JPEG"

    mime_type = Image.MIME.get(image_format, "image/jpeg")
    return image_to_base64(image_bytes), mime_type


async def download_image(url: str) -> bytes:
    """
    Download an image from URL with safety guards.

    Rejects responses larger than MAX_IMAGE_BYTES or with a non-image
    content type.

    Raises:
        InvalidImageError: If the file is too large or not an image
        httpx.HTTPError: If the download fails
    """
    max_bytes = settings.MAX_IMAGE_BYTES

    async with httpx.AsyncClient(timeout=settings.IMAGE_DOWNLOAD_TIMEOUT) as client:
        logger.info(f"Downloading image from: {url[:50]}...")

        # Stream download - enforce size limit during transfer
        chunks = []
        total = 0
        async with client.stream("GET", url, follow_redirects=True) as response:
            response.raise_for_status()

            content_type = response.headers.get("content-type", "")
            if content_type and not content_type.lower().startswith(("image/", "application/octet-stream")):
                raise InvalidImageError(f"Invalid file type: expected an image, got '{content_type}'.")

            async for chunk in response.aiter_bytes(chunk_size=65536):
                total += len(chunk)
                if total > max_bytes:
                    raise InvalidImageError(
                        f"Image too large: exceeds {max_bytes // (1024 * 1024)}MB limit."
                    )
                chunks.append(chunk)

    content = b"".join(chunks)
    logger.info(f"Downloaded {len(content)} bytes")
    return content
