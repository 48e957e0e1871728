"""Renderer for drawing wiggle frames using Pillow."""

import logging

from PIL import Image

from ..errors import RenderError
from .models import SourceImage, Transform

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


class FrameRenderer:
    """Renders the source image under a transform as RGBA PIL Images."""

    def __init__(self, source: SourceImage):
        """
        Initialize renderer.

        Args:
            source: The image to place on every frame

        Raises:
            RenderError: If the source has zero width or height
        """
        if source.width <= 0 or source.height <= 0:
            raise RenderError(f"source image is degenerate ({source.width}x{source.height})")
        self.source = source
        self._scaled: dict[float, Image.Image] = {}

    def render(self, transform: Transform, canvas_size: tuple[int, int], index: int | None = None) -> Image.Image:
        """
        Render one frame.

        The canvas starts fully transparent; the source is scaled by
        ``transform.scale_factor`` and drawn centred on the translated origin.

        Args:
            transform: Placement for this frame
            canvas_size: Output width and height
            index: Frame index, only used in error reports

        Returns:
            RGBA PIL Image of the frame
        """
        width, height = canvas_size
        if width <= 0 or height <= 0:
            raise RenderError(f"canvas is degenerate ({width}x{height})", frame_index=index)

        scaled = self._scaled_source(transform.scale_factor, index)
        try:
            canvas = Image.new("RGBA", (width, height), TRANSPARENT)
        except (MemoryError, ValueError) as exc:
            raise RenderError(f"could not allocate canvas: {exc}", frame_index=index) from exc

        left = _place(transform.translate_x - scaled.width / 2, width - scaled.width)
        top = _place(transform.translate_y - scaled.height / 2, height - scaled.height)
        canvas.alpha_composite(scaled, dest=(left, top))
        return canvas

    def _scaled_source(self, scale_factor: float, index: int | None) -> Image.Image:
        """Scale the source once per scale factor; sizes are floored to stay inside the canvas."""
        scaled = self._scaled.get(scale_factor)
        if scaled is not None:
            return scaled

        size = (
            max(1, int(self.source.width * scale_factor)),
            max(1, int(self.source.height * scale_factor)),
        )
        try:
            scaled = self.source.image.resize(size, Image.Resampling.LANCZOS)
        except (MemoryError, ValueError) as exc:
            raise RenderError(f"could not scale source: {exc}", frame_index=index) from exc
        logger.debug("Scaled source %s to %s", self.source.size, size)
        self._scaled[scale_factor] = scaled
        return scaled


def _place(origin: float, limit: int) -> int:
    """Snap a fractional origin to whole pixels within ``[0, limit]``."""
    return max(0, min(max(limit, 0), round(origin)))
