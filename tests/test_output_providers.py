"""Tests for output providers."""

from io import BytesIO

from PIL import Image
import pytest
from emoji_wiggler.errors import BudgetExceeded
from emoji_wiggler.output import (
    DitherAlgorithm,
    GifOutputProvider,
    PaletteConfig,
    media_type_for_output_format,
    resolve_output_provider,
    supported_output_formats,
)


def create_test_frame(color="red", size=(10, 10)):
    """Helper to create a test frame."""
    img = Image.new("RGBA", size, color)
    return img


def create_emoji_frame(size=32, offset=0):
    """Helper to create a frame with an opaque square on a transparent background."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    img.paste((255, 128, 0, 255), (8 + offset, 8, 24 + offset, 24))
    return img


def create_gradient_frame(size=32):
    """Helper to create a frame with many distinct colours."""
    img = Image.new("RGBA", (size, size))
    img.putdata([(x * 8 % 256, y * 8 % 256, (x + y) * 4 % 256, 255) for y in range(size) for x in range(size)])
    return img


def test_gif_provider_encodes_frames():
    """GifOutputProvider should encode frames to GIF format."""
    provider = GifOutputProvider("test_output.gif")
    frames = [create_test_frame("red"), create_test_frame("blue")]

    result = provider.encode(iter(frames), frame_duration=100)

    assert result.startswith(b"GIF89")
    assert len(result) > 0


def test_gif_provider_empty_frames():
    """GifOutputProvider should handle empty frame list."""
    provider = GifOutputProvider("test_output.gif")
    result = provider.encode(iter([]), frame_duration=100)

    # Empty result for empty frames
    assert result == b""


def test_gif_provider_loops_forever_with_frame_duration():
    """Encoded GIFs loop forever and keep every frame's duration."""
    provider = GifOutputProvider()
    frames = [create_emoji_frame(offset=0), create_emoji_frame(offset=4), create_emoji_frame(offset=8)]

    result = provider.encode(iter(frames), frame_duration=150)

    with Image.open(BytesIO(result)) as gif:
        assert gif.info["loop"] == 0
        assert gif.info["duration"] == 150
        assert gif.n_frames == 3


def test_gif_provider_keeps_transparency():
    """Transparent pixels map to the transparent palette index."""
    provider = GifOutputProvider()

    result = provider.encode(iter([create_emoji_frame()]), frame_duration=100)

    with Image.open(BytesIO(result)) as gif:
        assert "transparency" in gif.info
        rgba = gif.convert("RGBA")
        assert rgba.getpixel((0, 0))[3] == 0
        assert rgba.getpixel((16, 16))[3] == 255


def test_gif_provider_reduces_palette():
    """A small palette limits the colours in the output."""
    provider = GifOutputProvider(palette=PaletteConfig(colors=4, dither=DitherAlgorithm.NONE))

    result = provider.encode(iter([create_gradient_frame()]), frame_duration=100)

    with Image.open(BytesIO(result)) as gif:
        colors = gif.convert("RGBA").getcolors()
        assert colors is not None
        assert len(colors) <= 4


def test_smaller_palette_gives_smaller_output():
    """Palette size trades fidelity for size."""
    frames = [create_gradient_frame(64)]
    large = GifOutputProvider(palette=PaletteConfig(colors=256)).encode(iter(frames), frame_duration=100)
    small = GifOutputProvider(
        palette=PaletteConfig(colors=4, dither=DitherAlgorithm.NONE)
    ).encode(iter(frames), frame_duration=100)

    assert len(small) < len(large)


def test_gif_provider_enforces_ceiling():
    """Output over max_bytes is reported, not truncated."""
    provider = GifOutputProvider(max_bytes=10)

    with pytest.raises(BudgetExceeded) as exc_info:
        provider.encode(iter([create_test_frame()]), frame_duration=100)

    assert exc_info.value.max_bytes == 10
    assert exc_info.value.size_bytes > 10


@pytest.mark.parametrize("colors", [0, 1, 257])
def test_palette_config_rejects_invalid_sizes(colors):
    """Palette sizes outside 2..256 are rejected."""
    with pytest.raises(ValueError, match="Palette size"):
        PaletteConfig(colors=colors)


def test_provider_write_requires_path():
    """write() needs an output path."""
    with pytest.raises(ValueError, match="Output path not set"):
        GifOutputProvider().write(b"GIF89a")


def test_provider_write_creates_file(tmp_path):
    """write() stores the bytes at the provider's path."""
    output_path = tmp_path / "out.gif"
    provider = GifOutputProvider(str(output_path))

    provider.write(b"GIF89a")

    assert output_path.read_bytes() == b"GIF89a"


def test_resolve_gif_provider():
    """resolve_output_provider should return GifOutputProvider for .gif files."""
    provider = resolve_output_provider("output.gif")

    assert isinstance(provider, GifOutputProvider)


def test_resolve_unsupported_format():
    """resolve_output_provider should raise ValueError for unsupported formats."""
    with pytest.raises(ValueError, match="Unsupported output format"):
        resolve_output_provider("output.mp4")


def test_resolve_case_insensitive():
    """resolve_output_provider should handle uppercase extensions."""
    provider = resolve_output_provider("output.GIF")
    assert isinstance(provider, GifOutputProvider)


def test_media_types():
    """Supported formats map to their media types."""
    assert supported_output_formats() == ("gif",)
    assert media_type_for_output_format("GIF") == "image/gif"
    with pytest.raises(ValueError, match="Invalid format"):
        media_type_for_output_format("svg")
