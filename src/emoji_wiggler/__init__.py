"""Emoji Wiggler: turn a still image into a looping wiggle GIF under a size budget.

Example:
    >>> from emoji_wiggler import AnimationParameters, decode_image, encode_animation
    >>> source = decode_image(open("cat.png", "rb").read(), "image/png")
    >>> artifact = encode_animation(source, AnimationParameters(frame_count=12))
    >>> artifact.size_bytes <= AnimationParameters().size_budget_bytes
    True
"""

__version__ = "0.1.0"

from .animation import (
    AnimationParameters,
    CancellationToken,
    FrameSequence,
    SourceImage,
    build_frame_sequence,
    generate_transforms,
)
from .animation_pipeline import encode_animation, run_pipeline
from .controller import ControllerState, ControllerStatus, RegenerationController
from .decoding import decode_image, load_image
from .errors import (
    BudgetUnreachableError,
    DecodeError,
    EncodeError,
    PipelineCancelled,
    RenderError,
    WigglerError,
)
from .output import EncodedArtifact, SizeBudgetedEncoder

__all__ = [
    "AnimationParameters",
    "BudgetUnreachableError",
    "CancellationToken",
    "ControllerState",
    "ControllerStatus",
    "DecodeError",
    "EncodeError",
    "EncodedArtifact",
    "FrameSequence",
    "PipelineCancelled",
    "RegenerationController",
    "RenderError",
    "SizeBudgetedEncoder",
    "SourceImage",
    "WigglerError",
    "build_frame_sequence",
    "decode_image",
    "encode_animation",
    "generate_transforms",
    "load_image",
    "run_pipeline",
]
