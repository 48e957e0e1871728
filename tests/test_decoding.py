"""Tests for image decoding."""

from io import BytesIO

import pytest
from PIL import Image

from emoji_wiggler.decoding import SUPPORTED_MIME_TYPES, decode_image, load_image
from emoji_wiggler.errors import DecodeError

ORIENTATION_TAG = 0x0112


def encode_image(img, fmt, **save_args):
    """Helper to encode an image to bytes."""
    buffer = BytesIO()
    img.save(buffer, format=fmt, **save_args)
    return buffer.getvalue()


def test_decodes_png_to_rgba():
    """PNG bytes become an RGBA source of the same size."""
    raw = encode_image(Image.new("RGB", (40, 20), "green"), "PNG")

    source = decode_image(raw, "image/png")

    assert source.size == (40, 20)
    assert source.image.mode == "RGBA"


@pytest.mark.parametrize("mime, fmt", [("image/jpeg", "JPEG"), ("image/webp", "WEBP"), ("image/bmp", "BMP")])
def test_decodes_supported_formats(mime, fmt):
    """Every supported media type decodes."""
    raw = encode_image(Image.new("RGB", (16, 16), "blue"), fmt)

    assert decode_image(raw, mime).size == (16, 16)


def test_decodes_without_hint():
    """The format is sniffed when no hint is given."""
    raw = encode_image(Image.new("RGBA", (8, 8), (1, 2, 3, 4)), "PNG")

    assert decode_image(raw).image.getpixel((0, 0)) == (1, 2, 3, 4)


def test_animated_gif_uses_first_frame():
    """Animated inputs contribute their first frame."""
    frames = [Image.new("RGB", (12, 12), "red"), Image.new("RGB", (12, 12), "blue")]
    raw = encode_image(frames[0], "GIF", save_all=True, append_images=frames[1:], duration=100)

    source = decode_image(raw, "image/gif")

    assert source.image.getpixel((6, 6))[:3] == (255, 0, 0)


def test_exif_orientation_applied():
    """Rotated JPEGs report the size a viewer shows."""
    exif = Image.Exif()
    exif[ORIENTATION_TAG] = 6
    raw = encode_image(Image.new("RGB", (40, 20), "white"), "JPEG", exif=exif)

    assert decode_image(raw, "image/jpeg").size == (20, 40)


def test_unsupported_mime_rejected():
    """Unknown media types fail before decoding."""
    with pytest.raises(DecodeError, match="unsupported media type") as exc_info:
        decode_image(b"II*\x00", "image/tiff")

    assert exc_info.value.mime_hint == "image/tiff"
    assert "image/png" in str(exc_info.value)


def test_mime_hint_is_case_insensitive():
    """Media type hints ignore case."""
    raw = encode_image(Image.new("RGB", (4, 4)), "PNG")

    assert decode_image(raw, "IMAGE/PNG").size == (4, 4)


def test_empty_bytes_rejected():
    """Empty input is a decode error."""
    with pytest.raises(DecodeError, match="no image data"):
        decode_image(b"")


def test_garbage_rejected():
    """Bytes that are no image are a decode error."""
    with pytest.raises(DecodeError):
        decode_image(b"this is not an image", "image/png")


def test_hint_must_match_content():
    """PNG bytes labelled as JPEG are not decoded."""
    raw = encode_image(Image.new("RGB", (4, 4)), "PNG")

    with pytest.raises(DecodeError):
        decode_image(raw, "image/jpeg")


def test_supported_types():
    """The baseline decoder handles the common web formats."""
    assert set(SUPPORTED_MIME_TYPES) == {
        "image/png", "image/jpeg", "image/jpg", "image/gif", "image/webp", "image/bmp",
    }


def test_jpg_alias_accepted():
    """The non-standard image/jpg hint decodes like image/jpeg."""
    raw = encode_image(Image.new("RGB", (6, 9), "red"), "JPEG")

    assert decode_image(raw, "image/jpg").size == (6, 9)


def test_load_image_reads_file(tmp_path):
    """load_image decodes a file from disk."""
    path = tmp_path / "emoji.png"
    Image.new("RGBA", (10, 30)).save(path)

    assert load_image(path).size == (10, 30)


def test_load_image_missing_file(tmp_path):
    """A missing file is a decode error."""
    with pytest.raises(DecodeError, match="cannot read"):
        load_image(tmp_path / "missing.png")
