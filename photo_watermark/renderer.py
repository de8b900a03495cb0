"""Rasterize the tiled text watermark onto a copy of the source image.

The rotated frame is an affine matrix computed once per render and applied to
anchor coordinates. The text is rasterized once into a stamp, the stamp is
rotated once, and the rotated stamp is composited at every transformed anchor.
No drawing state survives a call, so repeated renders never leak alpha or
transforms into each other.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple, Union

from PIL import Image, ImageDraw

from .fonts import Font, load_font
from .settings import WatermarkSettings
from .tiling import TilePlan, plan_tiles, rotation_matrix, to_canvas
from .upload import SourceImage

logger = logging.getLogger(__name__)

Source = Union[SourceImage, Image.Image]

# transparent margin around the glyphs so rotation never clips them
STAMP_PADDING = 2


def _bitmap(source: Source) -> Image.Image:
    if isinstance(source, SourceImage):
        return source.image
    return source


def new_surface(source: Source) -> Image.Image:
    """Fresh RGBA surface holding only the base layer, at natural size."""
    base = _bitmap(source)
    surface = Image.new("RGBA", base.size, (0, 0, 0, 0))
    surface.paste(base.convert("RGBA"), (0, 0))
    return surface


def measure_text(text: str, font: Font) -> float:
    """Advance width of ``text``, like a canvas measureText().width."""
    return float(font.getlength(text))


def build_stamp(
    text: str, font: Font, fill: Tuple[int, int, int, int], rotation: float
) -> Tuple[Image.Image, Tuple[float, float]]:
    """Rasterize ``text`` once and rotate it.

    Returns the rotated stamp and the position of the text origin (left end of
    the baseline) inside it.
    """
    # glyph box relative to the left end of the alphabetic baseline
    left, top, right, bottom = font.getbbox(text, anchor="ls")
    width = max(1, int(math.ceil(right - left))) + 2 * STAMP_PADDING
    height = max(1, int(math.ceil(bottom - top))) + 2 * STAMP_PADDING
    origin = (STAMP_PADDING - left, STAMP_PADDING - top)

    # transparent ink-colored background keeps resampled edges from darkening
    stamp = Image.new("RGBA", (width, height), fill[:3] + (0,))
    draw = ImageDraw.Draw(stamp)
    draw.text(origin, text, font=font, fill=fill, anchor="ls")

    if rotation % 360 == 0:
        return stamp, origin

    # Pillow rotates counter-clockwise for positive angles; canvas is clockwise
    rotated = stamp.rotate(
        -rotation, resample=Image.Resampling.BICUBIC, expand=True, fillcolor=fill[:3] + (0,)
    )
    rel = (origin[0] - width / 2, origin[1] - height / 2)
    rotated_origin = to_canvas(rel, (rotated.width / 2, rotated.height / 2), rotation_matrix(rotation))
    return rotated, rotated_origin


def draw_tiles(
    surface: Image.Image,
    plan: TilePlan,
    stamp: Image.Image,
    stamp_origin: Tuple[float, float],
) -> int:
    """Composite ``stamp`` at every anchor of ``plan``; return how many landed."""
    W, H = surface.size
    center = (W / 2, H / 2)
    matrix = rotation_matrix(plan.rotation)
    sw, sh = stamp.size
    drawn = 0
    for anchor in plan.anchors():
        px, py = to_canvas(anchor, center, matrix)
        x = int(round(px - stamp_origin[0]))
        y = int(round(py - stamp_origin[1]))
        if x >= W or y >= H or x + sw <= 0 or y + sh <= 0:
            continue
        surface.alpha_composite(
            stamp,
            dest=(max(0, x), max(0, y)),
            source=(max(0, -x), max(0, -y)),
        )
        drawn += 1
    return drawn


def render(
    source: Source,
    settings: WatermarkSettings,
    font: Optional[Font] = None,
    font_path: Optional[str] = None,
) -> Image.Image:
    """Return a new surface with the base image and the tiled watermark.

    Empty ``settings.text`` yields the base image unmodified. Raises
    InvalidGeometry for degenerate steps (e.g. negative spacing that cancels
    the text width).
    """
    surface = new_surface(source)
    if not settings.text:
        return surface

    if font is None:
        font = load_font(settings.font_size, font_path)
    text_box_width = measure_text(settings.text, font)
    plan = plan_tiles(
        surface.width,
        surface.height,
        text_box_width,
        settings.font_size,
        settings.spacing,
        settings.rotation,
    )
    stamp, origin = build_stamp(settings.text, font, settings.rgba(), settings.rotation)
    drawn = draw_tiles(surface, plan, stamp, origin)
    logger.debug(
        "Rendered %dx%d: %d of %d tiles visible (rotation=%s)",
        surface.width,
        surface.height,
        drawn,
        len(plan),
        settings.rotation,
    )
    return surface


def render_preview(
    source: Source,
    settings: WatermarkSettings,
    max_width: int,
    font_path: Optional[str] = None,
) -> Image.Image:
    """Render at full size, then shrink for on-screen display only."""
    return fit_width(render(source, settings, font_path=font_path), max_width)


def fit_width(surface: Image.Image, max_width: int) -> Image.Image:
    """Downscaled copy no wider than ``max_width``; export never uses this."""
    if max_width <= 0 or surface.width <= max_width:
        return surface
    ratio = max_width / surface.width
    return surface.resize(
        (max_width, max(1, int(surface.height * ratio))), Image.Resampling.LANCZOS
    )
