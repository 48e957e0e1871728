"""Base class for output format providers."""

from io import BytesIO
from abc import ABC, abstractmethod
from typing import Generic, Iterator, TypeVar

from PIL import Image

from ..errors import BudgetExceeded

FrameT = TypeVar("FrameT")


class OutputProvider(ABC, Generic[FrameT]):
    """Abstract base class for output format providers (the codec service)."""

    def __init__(self, path: str = "", max_bytes: int | None = None):
        """
        Initialize the provider.

        Args:
            path: Path to the output file
            max_bytes: Optional hard ceiling on the encoded size
        """
        self.path = path
        self.max_bytes = max_bytes

    @abstractmethod
    def encode(self, frames: Iterator[FrameT], frame_duration: int) -> bytes:
        """
        Encode frames into the output format.

        Args:
            frames: Iterator of frame payloads consumed by this provider
            frame_duration: Frame duration in milliseconds

        Returns:
            Encoded output as bytes

        Raises:
            BudgetExceeded: If the output is over ``max_bytes``
        """
        raise NotImplementedError

    def write(self, data: bytes) -> None:
        """
        Write encoded data to a file.

        Args:
            data: Encoded data to write
        """
        if not self.path:
            raise ValueError("Output path not set")
        with open(self.path, "wb") as f:
            f.write(data)

    def _check_ceiling(self, data: bytes) -> bytes:
        if self.max_bytes is not None and len(data) > self.max_bytes:
            raise BudgetExceeded(len(data), self.max_bytes)
        return data


class PillowSequenceOutputProvider(OutputProvider[Image.Image], ABC):
    """Template output provider for Pillow-supported animated image formats."""

    @property
    @abstractmethod
    def output_format(self) -> str:
        """Pillow format identifier (for example, ``gif``)."""
        raise NotImplementedError

    def encode(self, frames: Iterator[Image.Image], frame_duration: int) -> bytes:
        frame_list = self.prepare_frames(list(frames))
        if not frame_list:
            return b""

        buffer = BytesIO()
        frame_list[0].save(
            buffer,
            format=self.output_format,
            save_all=True,
            append_images=frame_list[1:],
            duration=frame_duration,
            loop=0,
            **self.save_options,
        )
        return self._check_ceiling(buffer.getvalue())

    def prepare_frames(self, frames: list[Image.Image]) -> list[Image.Image]:
        """Convert frames into what the format's encoder expects."""
        return frames

    @property
    def save_options(self) -> dict[str, object]:
        """Additional Pillow ``save`` kwargs for this format."""
        return {}
