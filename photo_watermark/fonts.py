from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from PIL import ImageFont

logger = logging.getLogger(__name__)

DEFAULT_FONT_CANDIDATES = [
    # Common Linux
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    # macOS
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "/System/Library/Fonts/Supplemental/Helvetica.ttf",
    # Windows (best effort typical paths)
    "C:/Windows/Fonts/arial.ttf",
    "C:/Windows/Fonts/segoeui.ttf",
]

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def find_default_font() -> str:
    for p in DEFAULT_FONT_CANDIDATES:
        if Path(p).exists():
            return p
    # Fallback: try to locate any TTF under common dirs
    for root in ["/usr/share/fonts", "/System/Library/Fonts", "C:/Windows/Fonts"]:
        if Path(root).exists():
            for path in Path(root).rglob("*.ttf"):
                return str(path)
    return ""  # Pillow's bundled font is used


@lru_cache(maxsize=64)
def load_font(size: float, font_path: Optional[str] = None) -> Font:
    """Return a font rendering at ``size`` pixels.

    ``font_path`` wins when it points at a readable TrueType file, then the
    system candidates, then Pillow's bundled default font.
    """
    px = max(1, int(round(size)))
    path = font_path or find_default_font()
    if path:
        try:
            return ImageFont.truetype(path, size=px)
        except OSError as e:
            logger.warning("Cannot load font %s (%s); using bundled default", path, e)
    return ImageFont.load_default(size=px)
