"""Wiggle animation: transform generation, frame rendering and sequence building."""

from .cancellation import CancellationToken
from .models import AnimationParameters, CanvasGeometry, PhaseSeed, SourceImage, Transform
from .renderer import FrameRenderer
from .sequence import Frame, FrameSequence, build_frame_sequence, iter_frames
from .transforms import draw_phase_seed, fit_canvas, generate_transforms, iter_transforms

__all__ = [
    "AnimationParameters",
    "CancellationToken",
    "CanvasGeometry",
    "Frame",
    "FrameRenderer",
    "FrameSequence",
    "PhaseSeed",
    "SourceImage",
    "Transform",
    "build_frame_sequence",
    "draw_phase_seed",
    "fit_canvas",
    "generate_transforms",
    "iter_frames",
    "iter_transforms",
]
