"""Exception hierarchy for the wiggle pipeline.

Every failure the pipeline can report derives from :class:`WigglerError`, so
callers can catch one type and still tell the stages apart.
"""

from typing import Any


class WigglerError(Exception):
    """Base exception for all emoji-wiggler errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.args[0]} ({ctx})"
        return str(self.args[0])


class DecodeError(WigglerError):
    """Raised when input bytes cannot be decoded into a source image."""

    def __init__(self, reason: str, mime_hint: str | None = None) -> None:
        super().__init__(
            f"Failed to decode image: {reason}",
            context={"mime_hint": mime_hint} if mime_hint else None,
        )
        self.reason = reason
        self.mime_hint = mime_hint


class RenderError(WigglerError):
    """Raised when a frame cannot be rendered."""

    def __init__(self, reason: str, frame_index: int | None = None) -> None:
        super().__init__(
            f"Frame rendering failed: {reason}",
            context={"frame_index": frame_index} if frame_index is not None else None,
        )
        self.reason = reason
        self.frame_index = frame_index


class EncodeError(WigglerError):
    """Raised when the codec fails to produce an animation."""

    pass


class BudgetExceeded(EncodeError):
    """Raised by a codec when its output is over the byte ceiling."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        super().__init__(
            f"Encoded output is {size_bytes} bytes, over the {max_bytes} byte ceiling",
            context={"size_bytes": size_bytes, "max_bytes": max_bytes},
        )
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class BudgetUnreachableError(EncodeError):
    """Raised when no palette size brings the animation under the budget."""

    hint = "reduce the frame count or the canvas size"

    def __init__(self, size_budget_bytes: int, smallest_size: int, attempts: int) -> None:
        super().__init__(
            f"Could not fit the animation into {size_budget_bytes} bytes; {self.hint}",
            context={"smallest_size": smallest_size, "attempts": attempts},
        )
        self.size_budget_bytes = size_budget_bytes
        self.smallest_size = smallest_size
        self.attempts = attempts


class PipelineCancelled(WigglerError):
    """Raised when a run notices its cancellation token.

    Not a failure: the controller discards it silently.
    """

    def __init__(self, stage: str, completed_frames: int = 0) -> None:
        super().__init__(
            f"Pipeline cancelled during {stage}",
            context={"completed_frames": completed_frames},
        )
        self.stage = stage
        self.completed_frames = completed_frames
