"""Shared animation orchestration used by the controller, CLI and web app."""

import asyncio
import logging

from .animation.cancellation import CancellationToken
from .animation.models import AnimationParameters, SourceImage
from .animation.sequence import FrameSequence, build_frame_sequence, iter_frames
from .animation.transforms import UniformSource
from .output.encoder import EncodedArtifact, SizeBudgetedEncoder

logger = logging.getLogger(__name__)


def encode_animation(
    source: SourceImage,
    params: AnimationParameters,
    *,
    token: CancellationToken | None = None,
    uniform: UniformSource | None = None,
    encoder: SizeBudgetedEncoder | None = None,
) -> EncodedArtifact:
    """Render and encode one wiggle animation in a single blocking call."""
    sequence = build_frame_sequence(source, params, token, uniform=uniform)
    target_encoder = encoder or SizeBudgetedEncoder()
    return target_encoder.encode(sequence, params.size_budget_bytes, token)


async def run_pipeline(
    source: SourceImage,
    params: AnimationParameters,
    token: CancellationToken,
    *,
    uniform: UniformSource | None = None,
    encoder: SizeBudgetedEncoder | None = None,
) -> EncodedArtifact:
    """
    Render and encode one wiggle animation cooperatively.

    Control returns to the event loop after every frame, and the codec
    round-trip runs in a worker thread. The token is polled between frames
    and before the codec is called; a step already started always finishes.

    Args:
        source: The source image
        params: Animation parameters snapshot for this run
        token: Cancellation token owned by the run
        uniform: Randomness source for the phase seed
        encoder: Size-budgeted encoder, a default one if omitted

    Returns:
        The encoded artifact

    Raises:
        PipelineCancelled: If the token is set before the run finishes
        RenderError: If a frame cannot be rendered
        EncodeError: If encoding fails or the budget cannot be met
    """
    frames = []
    for frame in iter_frames(source, params, token, uniform=uniform):
        frames.append(frame)
        await asyncio.sleep(0)

    sequence = FrameSequence(frames=frames, frame_interval_ms=params.frame_interval_ms)
    del frames
    token.raise_if_cancelled("encoding", completed_frames=len(sequence))

    target_encoder = encoder or SizeBudgetedEncoder()
    return await asyncio.to_thread(
        target_encoder.encode, sequence, params.size_budget_bytes, token
    )
