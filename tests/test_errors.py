"""Tests for the exception hierarchy."""

import pytest

from emoji_wiggler.errors import (
    BudgetExceeded,
    BudgetUnreachableError,
    DecodeError,
    EncodeError,
    PipelineCancelled,
    RenderError,
    WigglerError,
)


@pytest.mark.parametrize(
    "error",
    [
        DecodeError("bad bytes"),
        RenderError("no canvas", frame_index=2),
        EncodeError("codec failed"),
        BudgetExceeded(2000, 1000),
        BudgetUnreachableError(1000, 1500, 7),
        PipelineCancelled("rendering", 3),
    ],
)
def test_all_errors_share_base(error):
    """Callers can catch every pipeline error as WigglerError."""
    assert isinstance(error, WigglerError)


def test_context_rendered_in_message():
    """Context values are appended to the message."""
    error = RenderError("canvas too small", frame_index=4)

    assert str(error) == "Frame rendering failed: canvas too small (frame_index=4)"
    assert error.context == {"frame_index": 4}


def test_message_without_context():
    """Errors without context print only their message."""
    assert str(EncodeError("codec failed")) == "codec failed"
    assert str(DecodeError("bad bytes")) == "Failed to decode image: bad bytes"


def test_budget_errors_are_encode_errors():
    """Budget failures belong to the encode stage."""
    assert issubclass(BudgetExceeded, EncodeError)
    assert issubclass(BudgetUnreachableError, EncodeError)


def test_budget_unreachable_carries_hint():
    """The unreachable-budget error tells the user what to change."""
    error = BudgetUnreachableError(1000, 1500, 7)

    assert error.size_budget_bytes == 1000
    assert error.smallest_size == 1500
    assert error.attempts == 7
    assert "Could not fit the animation into 1000 bytes" in str(error)
    assert BudgetUnreachableError.hint in str(error)


def test_pipeline_cancelled_fields():
    """Cancellation records where the run stopped."""
    error = PipelineCancelled("encoding", completed_frames=12)

    assert error.stage == "encoding"
    assert error.completed_frames == 12
    assert "encoding" in str(error)
