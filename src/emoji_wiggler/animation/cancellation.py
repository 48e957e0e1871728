"""Cooperative cancellation for pipeline runs."""

from ..errors import PipelineCancelled


class CancellationToken:
    """Token for cancelling a long-running pipeline run.

    Runs poll the token between steps; setting it never interrupts a step
    that has already started.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        """Request cancellation."""
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._cancelled

    def raise_if_cancelled(self, stage: str, completed_frames: int = 0) -> None:
        """Raise :class:`PipelineCancelled` if cancellation was requested."""
        if self._cancelled:
            raise PipelineCancelled(stage, completed_frames=completed_frames)
