"""Upload intake: media type check and decoding into a SourceImage."""

from __future__ import annotations

import io
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError, UnsupportedFormat

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
# file_uploader filter; the media type check below is what actually decides
SUPPORTED_IMPORT_EXTS = {".jpg", ".jpeg", ".png", ".webp"}


@dataclass(frozen=True)
class SourceImage:
    """Decoded upload. The core only reads ``image``; ``close`` releases it."""

    image: Image.Image = field(repr=False, compare=False)
    name: str = ""
    mime_type: str = ""

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self):
        return self.image.size

    def close(self) -> None:
        self.image.close()


def guess_mime_type(filename: str) -> str:
    mime, _ = mimetypes.guess_type(filename)
    if mime is None and Path(filename).suffix.lower() == ".webp":
        # older mimetypes tables lack webp
        mime = "image/webp"
    return mime or "application/octet-stream"


def check_mime_type(mime_type: Optional[str]) -> str:
    mime = (mime_type or "").strip().lower()
    if mime not in SUPPORTED_MIME_TYPES:
        raise UnsupportedFormat(
            f"Unsupported file type {mime_type or '(unknown)'}: please upload a JPG, PNG, or WebP image"
        )
    return mime


def load_image_bytes(data: bytes) -> Image.Image:
    """Decode ``data`` fully, apply EXIF orientation, return an RGBA bitmap."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            oriented = ImageOps.exif_transpose(im)
            return oriented.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Failed to load image: {e}") from e


def load_upload(
    data: bytes,
    mime_type: Optional[str],
    name: str = "",
    max_bytes: Optional[int] = None,
) -> SourceImage:
    """Validate and decode one uploaded file.

    Raises UnsupportedFormat for any media type other than jpeg/png/webp and
    DecodeError when the bytes are empty, too large or undecodable.
    """
    mime = check_mime_type(mime_type)
    if not data:
        raise DecodeError("Failed to load image: file is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise DecodeError(
            f"Failed to load image: {len(data)} bytes exceeds the {max_bytes} byte limit"
        )
    image = load_image_bytes(data)
    logger.info("Loaded %s (%s, %dx%d)", name or "upload", mime, image.width, image.height)
    return SourceImage(image=image, name=name, mime_type=mime)


def load_path(path: Path, max_bytes: Optional[int] = None) -> SourceImage:
    """Load an image from disk, deriving the media type from its file name."""
    mime = check_mime_type(guess_mime_type(path.name))
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"Cannot read {path}: {e}") from e
    return load_upload(data, mime, name=path.name, max_bytes=max_bytes)
