"""Frame sequence building: seed, transforms and rendering for one animation request."""

import logging
import random
from dataclasses import dataclass, field
from typing import Iterator

from PIL import Image

from .cancellation import CancellationToken
from .models import AnimationParameters, CanvasGeometry, SourceImage
from .renderer import FrameRenderer
from .transforms import UniformSource, draw_phase_seed, fit_canvas, generate_transforms

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Frame:
    """One rendered frame; ``index`` order is temporal order."""

    index: int
    image: Image.Image


@dataclass
class FrameSequence:
    """Ordered frames plus the timing shared by all of them."""

    frames: list[Frame]
    frame_interval_ms: int
    loop: bool = field(default=True)

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def frame_rate(self) -> float:
        """Frames per second equivalent of ``frame_interval_ms``."""
        return 1000 / self.frame_interval_ms

    @property
    def size(self) -> tuple[int, int]:
        return self.frames[0].image.size if self.frames else (0, 0)

    def images(self) -> list[Image.Image]:
        return [frame.image for frame in self.frames]


def iter_frames(
    source: SourceImage,
    params: AnimationParameters,
    token: CancellationToken | None = None,
    *,
    uniform: UniformSource | None = None,
    geometry: CanvasGeometry | None = None,
) -> Iterator[Frame]:
    """
    Render frames for one request lazily, in increasing index order.

    A fresh phase seed is drawn on every call. The token is checked before
    each frame, so a superseded run stops at the next frame boundary.

    Args:
        source: The source image
        params: Animation parameters snapshot
        token: Optional cancellation token
        uniform: Randomness source, ``random.uniform`` by default
        geometry: Precomputed canvas geometry

    Yields:
        Frames 0..frame_count-1

    Raises:
        PipelineCancelled: If the token is set before the last frame
        RenderError: If the source is degenerate or a canvas cannot be allocated
    """
    renderer = FrameRenderer(source)
    geometry = geometry or fit_canvas(source.size, params)
    seed = draw_phase_seed(uniform or random.uniform)
    transforms = generate_transforms(params, geometry, seed)
    logger.debug(
        "Rendering %d frames on a %dx%d canvas (frequencies=%s)",
        len(transforms), geometry.width, geometry.height, seed.frequencies,
    )

    for index, transform in enumerate(transforms):
        if token is not None:
            token.raise_if_cancelled("rendering", completed_frames=index)
        yield Frame(index=index, image=renderer.render(transform, geometry.size, index=index))


def build_frame_sequence(
    source: SourceImage,
    params: AnimationParameters,
    token: CancellationToken | None = None,
    *,
    uniform: UniformSource | None = None,
) -> FrameSequence:
    """Render the full ordered frame sequence for one animation request."""
    frames = list(iter_frames(source, params, token, uniform=uniform))
    return FrameSequence(frames=frames, frame_interval_ms=params.frame_interval_ms)
