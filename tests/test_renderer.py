"""Tests for the frame renderer."""

import pytest
from PIL import Image

from emoji_wiggler.animation.models import AnimationParameters, SourceImage, Transform
from emoji_wiggler.animation.renderer import FrameRenderer
from emoji_wiggler.animation.transforms import fit_canvas
from emoji_wiggler.errors import RenderError


def create_source(size=(512, 512), color=(255, 0, 0, 255)) -> SourceImage:
    """Helper to create an opaque square source."""
    return SourceImage.from_image(Image.new("RGBA", size, color))


def centred(geometry, offset_x=0.0, offset_y=0.0, scale=None) -> Transform:
    return Transform(
        translate_x=geometry.width / 2 + offset_x,
        translate_y=geometry.height / 2 + offset_y,
        scale_factor=scale if scale is not None else geometry.scaled_width / 512,
        offset_x=offset_x,
        offset_y=offset_y,
    )


def test_render_produces_rgba_canvas():
    """Frames have the canvas size and keep an alpha channel."""
    params = AnimationParameters(target_max_dimension=120, image_scale=0.8)
    geometry = fit_canvas((512, 512), params)
    renderer = FrameRenderer(create_source())

    frame = renderer.render(centred(geometry), geometry.size)

    assert frame.size == (120, 120)
    assert frame.mode == "RGBA"


def test_render_clears_to_transparent():
    """Pixels outside the drawn image are fully transparent."""
    params = AnimationParameters(target_max_dimension=120, image_scale=0.5)
    geometry = fit_canvas((512, 512), params)
    renderer = FrameRenderer(create_source())

    frame = renderer.render(centred(geometry), geometry.size)

    assert frame.getpixel((0, 0))[3] == 0
    red, _green, _blue, alpha = frame.getpixel((60, 60))
    assert alpha == 255
    assert red >= 250


def test_render_centres_scaled_image():
    """An unshifted transform draws the scaled image in the middle."""
    params = AnimationParameters(target_max_dimension=120, image_scale=0.5)
    geometry = fit_canvas((512, 512), params)
    renderer = FrameRenderer(create_source())

    frame = renderer.render(centred(geometry), geometry.size)

    assert frame.getchannel("A").getbbox() == (30, 30, 90, 90)


@pytest.mark.parametrize("sign", [-1, 1])
def test_render_at_max_offset_stays_inside(sign):
    """Drawing at the clamped extremes touches, but never crosses, the canvas edge."""
    params = AnimationParameters(target_max_dimension=120, image_scale=0.8)
    geometry = fit_canvas((512, 512), params)
    renderer = FrameRenderer(create_source())
    transform = centred(
        geometry,
        offset_x=sign * geometry.max_offset_x,
        offset_y=sign * geometry.max_offset_y,
    )

    frame = renderer.render(transform, geometry.size)
    left, top, right, bottom = frame.getchannel("A").getbbox()

    assert right - left == 96
    assert bottom - top == 96
    assert left >= 0 and top >= 0
    assert right <= 120 and bottom <= 120
    if sign > 0:
        assert right == 120
    else:
        assert left == 0


def test_render_preserves_source_transparency():
    """Transparent parts of the source stay transparent on the frame."""
    image = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    image.paste((0, 0, 255, 255), (0, 0, 50, 100))
    renderer = FrameRenderer(SourceImage.from_image(image))
    transform = Transform(translate_x=50, translate_y=50, scale_factor=1.0)

    frame = renderer.render(transform, (100, 100))

    assert frame.getpixel((25, 50)) == (0, 0, 255, 255)
    assert frame.getpixel((75, 50))[3] == 0


def test_renderer_rejects_degenerate_source():
    """Zero-sized sources cannot be rendered."""
    with pytest.raises(RenderError, match="degenerate"):
        FrameRenderer(SourceImage.from_image(Image.new("RGBA", (0, 10))))


def test_render_rejects_degenerate_canvas():
    """Zero-sized canvases are reported with the frame index."""
    renderer = FrameRenderer(create_source((10, 10)))
    transform = Transform(translate_x=5, translate_y=5, scale_factor=1.0)

    with pytest.raises(RenderError) as exc_info:
        renderer.render(transform, (0, 10), index=3)

    assert exc_info.value.frame_index == 3


def test_render_does_not_mutate_source():
    """The source image is never written to."""
    source = create_source((20, 20))
    before = source.image.tobytes()
    renderer = FrameRenderer(source)

    renderer.render(Transform(translate_x=10, translate_y=10, scale_factor=0.5), (20, 20))

    assert source.image.tobytes() == before


def test_source_from_image_copies():
    """SourceImage keeps its own RGBA copy of the caller's image."""
    original = Image.new("RGB", (4, 4), "white")
    source = SourceImage.from_image(original)

    assert source.image is not original
    assert source.image.mode == "RGBA"
    assert source.size == (4, 4)
