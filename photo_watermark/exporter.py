"""Encode a rendered surface to png / jpeg / webp bytes."""

from __future__ import annotations

import io
import logging
from concurrent.futures import Executor, Future
from typing import Dict

from PIL import Image

from .errors import EncodeError

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("png", "jpeg", "webp")
JPEG_QUALITY = 92  # canvas toBlob quality 0.92

_ALIASES = {"jpg": "jpeg"}

MIME_TYPES: Dict[str, str] = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
}


def normalize_format(fmt: str) -> str:
    key = (fmt or "").strip().lower().lstrip(".")
    key = _ALIASES.get(key, key)
    if key not in EXPORT_FORMATS:
        raise EncodeError(f"Unsupported export format {fmt!r}; choose png, jpeg or webp")
    return key


def export_filename(fmt: str) -> str:
    return f"watermarked.{normalize_format(fmt)}"


def mime_type_for(fmt: str) -> str:
    return MIME_TYPES[normalize_format(fmt)]


def _flatten(surface: Image.Image) -> Image.Image:
    # transparent pixels come out black, as a canvas exports them to jpeg
    background = Image.new("RGBA", surface.size, (0, 0, 0, 255))
    return Image.alpha_composite(background, surface.convert("RGBA")).convert("RGB")


def export_surface(surface: Image.Image, fmt: str) -> bytes:
    """Return the encoded bytes of ``surface``.

    PNG and WebP keep alpha (WebP is written lossless); JPEG uses quality 92
    and drops alpha. Raises EncodeError instead of ever returning empty bytes.
    """
    key = normalize_format(fmt)
    if surface is None or surface.width == 0 or surface.height == 0:
        raise EncodeError("Nothing to export: surface is empty")

    buf = io.BytesIO()
    try:
        if key == "png":
            surface.convert("RGBA").save(buf, format="PNG")
        elif key == "jpeg":
            _flatten(surface).save(buf, format="JPEG", quality=JPEG_QUALITY)
        else:
            surface.convert("RGBA").save(buf, format="WEBP", lossless=True)
    except (OSError, KeyError, ValueError) as e:
        raise EncodeError(f"Failed to encode {key}: {e}") from e

    data = buf.getvalue()
    if not data:
        raise EncodeError(f"Encoder produced no {key} output")
    logger.info("Exported %dx%d surface as %s (%d bytes)", surface.width, surface.height, key, len(data))
    return data


def export_surface_async(surface: Image.Image, fmt: str, executor: Executor) -> "Future[bytes]":
    """Encode on ``executor``; the worker gets a snapshot, never the live surface."""
    normalize_format(fmt)
    snapshot = surface.copy()
    return executor.submit(export_surface, snapshot, fmt)
