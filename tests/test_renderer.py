import io

import pytest
from PIL import Image, ImageChops

from conftest import make_source
from photo_watermark.errors import InvalidGeometry
from photo_watermark.exporter import export_surface
from photo_watermark.fonts import load_font
from photo_watermark.renderer import build_stamp, render, render_preview
from photo_watermark.settings import WatermarkSettings

SAMPLE = WatermarkSettings(
    text="SAMPLE", font_size=24, opacity=0.3, rotation=-30, spacing=100, color="#000000"
)


def test_surface_matches_source_size(white_source):
    surface = render(white_source, SAMPLE)
    assert surface.size == (400, 300)
    assert surface.mode == "RGBA"


@pytest.mark.parametrize(
    "settings",
    [
        WatermarkSettings(),
        WatermarkSettings(text="", font_size=72, opacity=0.8, rotation=90, spacing=50, color="#ff0000"),
        WatermarkSettings(text="", spacing=-10_000),
    ],
)
def test_empty_text_returns_base_image(gradient_source, settings):
    surface = render(gradient_source, settings)
    assert surface.tobytes() == gradient_source.image.convert("RGBA").tobytes()


def test_render_is_deterministic(gradient_source):
    first = render(gradient_source, SAMPLE)
    second = render(gradient_source, SAMPLE)
    assert first.tobytes() == second.tobytes()


def test_render_draws_watermark(white_source):
    surface = render(white_source, SAMPLE)
    # the base is opaque, so only the color channels change
    diff = ImageChops.difference(surface, white_source.image)
    assert diff.getbbox(alpha_only=False) is not None


def test_render_leaves_source_untouched(gradient_source):
    before = gradient_source.image.tobytes()
    render(gradient_source, SAMPLE)
    render(gradient_source, SAMPLE.replace(rotation=45, color="#ff0000"))
    assert gradient_source.image.tobytes() == before


def test_successive_renders_do_not_accumulate(white_source):
    dense = SAMPLE.replace(opacity=0.8, spacing=50)
    expected = render(white_source, SAMPLE).tobytes()
    render(white_source, dense)
    assert render(white_source, SAMPLE).tobytes() == expected


def test_opacity_limits_darkness(white_source):
    settings = SAMPLE.replace(rotation=0, opacity=0.3)
    rgb = render(white_source, settings).convert("RGB")
    darkest = min(rgb.getextrema(), key=lambda band: band[0])[0]
    # black at 30% over white never goes below ~70% white
    assert 170 <= darkest < 255


def test_color_is_applied(white_source):
    settings = SAMPLE.replace(rotation=0, opacity=0.8, color="#ff0000")
    r, g, b = render(white_source, settings).convert("RGB").split()
    assert r.getextrema()[0] >= 250
    assert g.getextrema()[0] < 200
    assert b.getextrema()[0] < 200


def test_rotation_changes_pixels(white_source):
    flat = render(white_source, SAMPLE.replace(rotation=0))
    tilted = render(white_source, SAMPLE.replace(rotation=45))
    assert flat.tobytes() != tilted.tobytes()
    w, h = flat.size
    for box in ((0, 0, 100, 100), (w - 100, h - 100, w, h)):
        assert flat.crop(box).tobytes() != tilted.crop(box).tobytes(), box


def test_watermark_reaches_all_quadrants(white_source):
    surface = render(white_source, SAMPLE.replace(spacing=50))
    w, h = surface.size
    for box in ((0, 0, w // 2, h // 2), (w // 2, 0, w, h // 2), (0, h // 2, w // 2, h), (w // 2, h // 2, w, h)):
        quadrant = surface.crop(box).convert("L")
        assert quadrant.getextrema()[0] < 255, box


def test_transparent_source_keeps_alpha():
    source = make_source(size=(120, 80), color=(0, 0, 0, 0))
    surface = render(source, SAMPLE)
    alpha = surface.getchannel("A")
    assert alpha.getextrema()[0] == 0
    assert alpha.getextrema()[1] > 0


def test_render_accepts_plain_pillow_image():
    img = Image.new("RGB", (50, 40), (10, 20, 30))
    surface = render(img, SAMPLE)
    assert surface.size == (50, 40)
    assert surface.mode == "RGBA"


def test_degenerate_spacing_fails_loudly(white_source):
    with pytest.raises(InvalidGeometry):
        render(white_source, SAMPLE.replace(spacing=-1000))


def test_stamp_origin_is_inside_rotated_stamp():
    font = load_font(24)
    stamp, (ox, oy) = build_stamp("SAMPLE", font, (0, 0, 0, 255), -30)
    assert 0 <= ox <= stamp.width
    assert 0 <= oy <= stamp.height
    assert stamp.getchannel("A").getextrema()[1] > 0


def test_render_preview_shrinks_for_display():
    source = make_source(size=(1600, 900))
    preview = render_preview(source, SAMPLE, 800)
    assert preview.size == (800, 450)
    small = make_source(size=(300, 200))
    assert render_preview(small, SAMPLE, 800).size == (300, 200)


def test_sample_scenario_exports_png(white_source):
    surface = render(white_source, SAMPLE)
    data = export_surface(surface, "png")
    assert data
    with Image.open(io.BytesIO(data)) as decoded:
        assert decoded.format == "PNG"
        assert decoded.size == (400, 300)
