"""Value types shared by the transform generator, renderer and sequence builder."""

import dataclasses
from dataclasses import dataclass

from PIL import Image

from ..constants import (
    DEFAULT_FRAME_COUNT,
    DEFAULT_FRAME_INTERVAL_MS,
    DEFAULT_IMAGE_SCALE,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_SIZE_BUDGET_BYTES,
    DEFAULT_WIGGLE_INTENSITY,
)


@dataclass(frozen=True)
class SourceImage:
    """Decoded RGBA bitmap owned by one animation request."""

    image: Image.Image

    @classmethod
    def from_image(cls, image: Image.Image) -> "SourceImage":
        """Wrap a private RGBA copy of ``image`` so the caller's image is never shared."""
        return cls(image.convert("RGBA") if image.mode != "RGBA" else image.copy())

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class AnimationParameters:
    """Snapshot of the user-tunable animation settings."""

    frame_count: int = DEFAULT_FRAME_COUNT
    frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS
    wiggle_intensity: float = DEFAULT_WIGGLE_INTENSITY
    image_scale: float = DEFAULT_IMAGE_SCALE
    target_max_dimension: int = DEFAULT_MAX_DIMENSION
    size_budget_bytes: int = DEFAULT_SIZE_BUDGET_BYTES

    def __post_init__(self) -> None:
        for name in ("frame_count", "frame_interval_ms", "target_max_dimension", "size_budget_bytes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not self.wiggle_intensity > 0:
            raise ValueError(f"wiggle_intensity must be positive, got {self.wiggle_intensity!r}")
        if not 0 < self.image_scale <= 1:
            raise ValueError(f"image_scale must be in (0, 1], got {self.image_scale!r}")

    def replace(self, **changes: object) -> "AnimationParameters":
        """Return a new snapshot with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True, slots=True)
class PhaseSeed:
    """Per-request random phases and frequencies shared by every frame of one sequence."""

    phases: tuple[float, float, float]
    frequencies: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class CanvasGeometry:
    """Canvas size and the room the scaled image has to move in."""

    width: int
    height: int
    fit_scale: float
    scaled_width: float
    scaled_height: float

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def max_offset_x(self) -> float:
        return max(0.0, (self.width - self.scaled_width) / 2)

    @property
    def max_offset_y(self) -> float:
        return max(0.0, (self.height - self.scaled_height) / 2)


@dataclass(frozen=True, slots=True)
class Transform:
    """Placement of the source image on the canvas for one frame."""

    translate_x: float
    translate_y: float
    scale_factor: float
    offset_x: float = 0.0
    offset_y: float = 0.0
