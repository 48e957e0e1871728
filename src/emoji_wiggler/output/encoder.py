"""Size-budgeted encoding of a frame sequence into a palette GIF."""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from ..animation.cancellation import CancellationToken
from ..animation.sequence import FrameSequence
from ..constants import DITHER_MIN_COLORS, MAX_ENCODE_ATTEMPTS, PALETTE_LADDER
from ..errors import BudgetExceeded, BudgetUnreachableError, EncodeError
from .base import OutputProvider
from .gif_provider import DitherAlgorithm, GifOutputProvider, PaletteConfig

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[PaletteConfig, int], OutputProvider]


@dataclass(frozen=True)
class EncodedArtifact:
    """Encoded animation bytes; never mutated after creation."""

    data: bytes
    palette_colors: int
    attempts: int
    media_type: str = "image/gif"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def default_palette_ladder(ladder: Sequence[int] = PALETTE_LADDER) -> tuple[PaletteConfig, ...]:
    """Palette configs from largest to smallest; small palettes drop dithering."""
    sizes = sorted(set(ladder), reverse=True)
    return tuple(
        PaletteConfig(
            colors=colors,
            dither=DitherAlgorithm.FLOYD_STEINBERG if colors >= DITHER_MIN_COLORS else DitherAlgorithm.NONE,
        )
        for colors in sizes
    )


def _gif_provider(palette: PaletteConfig, max_bytes: int) -> OutputProvider:
    return GifOutputProvider(palette=palette, max_bytes=max_bytes)


class SizeBudgetedEncoder:
    """Encodes a frame sequence under a byte ceiling.

    The codec is handed the ceiling on every attempt and reports an
    over-budget result instead of truncating it; the encoder then retries
    with the next, strictly smaller palette.
    """

    def __init__(
        self,
        provider_factory: ProviderFactory = _gif_provider,
        palette_ladder: Sequence[PaletteConfig] | None = None,
        max_attempts: int = MAX_ENCODE_ATTEMPTS,
    ):
        """
        Initialize the encoder.

        Args:
            provider_factory: Builds a codec for a palette config and byte ceiling
            palette_ladder: Palette configs to try; must be strictly decreasing in size
            max_attempts: Upper bound on encode attempts
        """
        ladder = tuple(palette_ladder) if palette_ladder is not None else default_palette_ladder()
        sizes = [config.colors for config in ladder]
        if not ladder or any(a <= b for a, b in zip(sizes, sizes[1:])):
            raise ValueError(f"Palette ladder must be non-empty and strictly decreasing, got {sizes}")
        if max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self.provider_factory = provider_factory
        self.palette_ladder = ladder[:max_attempts]

    def encode(
        self,
        sequence: FrameSequence,
        size_budget_bytes: int,
        token: CancellationToken | None = None,
    ) -> EncodedArtifact:
        """
        Encode ``sequence`` into at most ``size_budget_bytes`` bytes.

        Args:
            sequence: Ordered frames and timing; consumed by this call
            size_budget_bytes: Hard ceiling on the artifact size
            token: Optional cancellation token, checked before each codec submission

        Returns:
            The first artifact that fits

        Raises:
            PipelineCancelled: If the token is set before a submission
            BudgetUnreachableError: If even the smallest palette is over budget
            EncodeError: If the codec fails for any other reason
        """
        if not sequence.frames:
            raise EncodeError("Cannot encode an empty frame sequence")

        frame_duration = max(1, round(1000 / sequence.frame_rate))
        smallest = 0
        for attempt, palette in enumerate(self.palette_ladder, start=1):
            if token is not None:
                token.raise_if_cancelled("encoding", completed_frames=len(sequence))

            provider = self.provider_factory(palette, size_budget_bytes)
            try:
                data = provider.encode(iter(sequence.images()), frame_duration=frame_duration)
            except BudgetExceeded as exc:
                smallest = exc.size_bytes if not smallest else min(smallest, exc.size_bytes)
                logger.debug(
                    "Attempt %d with %d colours gave %d bytes (budget %d)",
                    attempt, palette.colors, exc.size_bytes, size_budget_bytes,
                )
                continue
            except (OSError, ValueError) as exc:
                raise EncodeError(f"Codec failed: {exc}", context={"colors": palette.colors}) from exc

            if len(data) > size_budget_bytes:
                # Codec ignored the ceiling
                smallest = len(data) if not smallest else min(smallest, len(data))
                continue

            logger.info(
                "Encoded %d frames into %d bytes with %d colours (attempt %d)",
                len(sequence), len(data), palette.colors, attempt,
            )
            return EncodedArtifact(data=data, palette_colors=palette.colors, attempts=attempt)

        logger.warning(
            "No palette fit %d bytes; smallest attempt was %d bytes", size_budget_bytes, smallest
        )
        raise BudgetUnreachableError(size_budget_bytes, smallest, len(self.palette_ladder))
