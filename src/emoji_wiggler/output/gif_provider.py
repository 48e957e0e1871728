"""GIF output provider with a reduced, transparency-aware global palette."""

import enum
import math
from dataclasses import dataclass

from PIL import Image

from ..constants import ALPHA_THRESHOLD
from .base import PillowSequenceOutputProvider

# Frames sampled into the palette mosaic
_MAX_PALETTE_SAMPLES = 64


class DitherAlgorithm(enum.Enum):
    """Dithering algorithm for GIF quantization."""
    FLOYD_STEINBERG = "floyd_steinberg"
    NONE = "none"

    @property
    def pillow(self) -> Image.Dither:
        return {
            DitherAlgorithm.FLOYD_STEINBERG: Image.Dither.FLOYDSTEINBERG,
            DitherAlgorithm.NONE: Image.Dither.NONE,
        }[self]


@dataclass(frozen=True)
class PaletteConfig:
    """Palette size and dithering; smaller and coarser means smaller files."""
    colors: int = 256
    dither: DitherAlgorithm = DitherAlgorithm.FLOYD_STEINBERG

    def __post_init__(self) -> None:
        if not 2 <= self.colors <= 256:
            raise ValueError(f"Palette size must be between 2 and 256, got {self.colors}")


class GifOutputProvider(PillowSequenceOutputProvider):
    """Output provider for GIF format.

    One palette slot is reserved for transparency, the rest is a global
    palette shared by all frames.
    """

    def __init__(
        self,
        path: str = "",
        palette: PaletteConfig | None = None,
        max_bytes: int | None = None,
    ):
        super().__init__(path, max_bytes=max_bytes)
        self.palette = palette or PaletteConfig()
        self._transparent_index = 0

    @property
    def output_format(self) -> str:
        return "gif"

    @property
    def save_options(self) -> dict[str, object]:
        return {
            "optimize": False,
            "disposal": 2,
            "transparency": self._transparent_index,
        }

    def prepare_frames(self, frames: list[Image.Image]) -> list[Image.Image]:
        if not frames:
            return []

        rgba_frames = [frame.convert("RGBA") for frame in frames]
        palette_img = _global_palette(rgba_frames, self.palette.colors - 1)
        entries = (palette_img.getpalette() or [])[: 3 * (self.palette.colors - 1)]
        self._transparent_index = len(entries) // 3
        # Keep the transparent slot black so it never looks like a real colour
        full_palette = entries + [0, 0, 0]

        quantized: list[Image.Image] = []
        for frame in rgba_frames:
            q = frame.convert("RGB").quantize(palette=palette_img, dither=self.palette.dither.pillow)
            q.putpalette(full_palette)
            transparent_mask = frame.getchannel("A").point(
                lambda alpha: 255 if alpha < ALPHA_THRESHOLD else 0
            )
            q.paste(self._transparent_index, mask=transparent_mask)
            q.info["transparency"] = self._transparent_index
            quantized.append(q)
        return quantized


def _global_palette(frames: list[Image.Image], max_colors: int) -> Image.Image:
    """Quantize a mosaic of (at most 64) frames into one shared palette image."""
    sample = frames
    if len(frames) > _MAX_PALETTE_SAMPLES:
        step = len(frames) / _MAX_PALETTE_SAMPLES
        sample = [frames[int(i * step)] for i in range(_MAX_PALETTE_SAMPLES)]

    frame_w, frame_h = sample[0].size
    cols = min(len(sample), 8)
    rows = math.ceil(len(sample) / cols)
    mosaic = Image.new("RGB", (frame_w * cols, frame_h * rows))
    for idx, frame in enumerate(sample):
        r, c = divmod(idx, cols)
        mosaic.paste(frame.convert("RGB"), (c * frame_w, r * frame_h))

    return mosaic.quantize(
        colors=max(1, max_colors),
        method=Image.Quantize.MEDIANCUT,
        dither=Image.Dither.NONE,
    )
