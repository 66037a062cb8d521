"""Pillow-based normalization applied to every photo before it is stored."""

import io

from loguru import logger
from PIL import Image, ImageOps

from photoqr.services.errors import ImageProcessingError

JPEG_MIME = "image/jpeg"
_JPEG_MODES = {"RGB", "L"}


def _downsize(image: Image.Image, max_width: int) -> Image.Image:
    if image.width <= max_width:
        return image
    height = max(1, round(image.height * max_width / image.width))
    return image.resize((max_width, height), Image.Resampling.LANCZOS)


def normalize_image(data: bytes, max_width: int = 1920, quality: int = 82) -> bytes:
    """Return ``data`` as an upright JPEG no wider than ``max_width``.

    Orientation is resolved before resizing so the width limit applies to the
    picture as it is displayed, and encoding runs last on the final pixels.
    """
    try:
        with Image.open(io.BytesIO(data)) as source:
            source_size = source.size
            image = ImageOps.exif_transpose(source)
            image = _downsize(image, max_width)
            if image.mode not in _JPEG_MODES:
                image = image.convert("RGB")

            output = io.BytesIO()
            image.save(output, format="JPEG", quality=quality)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Image decode failed size_bytes={} error={}", len(data), str(exc))
        raise ImageProcessingError(f"Could not process image: {exc}") from exc

    result = output.getvalue()
    logger.debug(
        "Image normalized source_size={} result_size={} size_bytes={}",
        source_size,
        image.size,
        len(result),
    )
    return result
