"""Image decoding: raw bytes or files to a SourceImage."""

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from .animation.models import SourceImage
from .errors import DecodeError

logger = logging.getLogger(__name__)

# Mime hints accepted by the baseline decoder, mapped to Pillow format names
SUPPORTED_MIME_TYPES: dict[str, str] = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",  # common non-standard alias
    "image/gif": "GIF",
    "image/webp": "WEBP",
    "image/bmp": "BMP",
}


def decode_image(raw_bytes: bytes, mime_hint: str | None = None) -> SourceImage:
    """
    Decode raw image bytes into an RGBA source image.

    Animated inputs contribute their first frame. EXIF orientation is
    applied so width and height match what a viewer shows.

    Args:
        raw_bytes: Encoded image data
        mime_hint: Optional media type; when given it must be supported

    Returns:
        The decoded SourceImage

    Raises:
        DecodeError: If the hint is unsupported or the data is not a readable image
    """
    formats = None
    if mime_hint:
        pillow_format = SUPPORTED_MIME_TYPES.get(mime_hint.lower())
        if pillow_format is None:
            supported = ", ".join(SUPPORTED_MIME_TYPES)
            raise DecodeError(f"unsupported media type (supported: {supported})", mime_hint)
        formats = [pillow_format]

    if not raw_bytes:
        raise DecodeError("no image data", mime_hint)

    try:
        with Image.open(BytesIO(raw_bytes), formats=formats) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            source = SourceImage.from_image(oriented)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(str(exc) or exc.__class__.__name__, mime_hint) from exc

    logger.debug("Decoded %s image of %dx%d", mime_hint or "untyped", source.width, source.height)
    return source


def load_image(path: str | Path) -> SourceImage:
    """Read and decode an image file."""
    try:
        raw_bytes = Path(path).read_bytes()
    except OSError as exc:
        raise DecodeError(f"cannot read '{path}': {exc.strerror or exc}") from exc
    return decode_image(raw_bytes)
