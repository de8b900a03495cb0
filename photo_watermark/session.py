"""Explicit UI state: the current image and its settings.

The Streamlit app keeps one ``WatermarkSession`` in ``st.session_state`` and
passes its contents into the renderer on each rerun; nothing in the core reads
globals.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from PIL import Image

from .errors import ExportUnavailable
from .exporter import export_filename, export_surface
from .renderer import render
from .settings import DEFAULT_SETTINGS, WatermarkSettings
from .upload import SourceImage, load_upload

logger = logging.getLogger(__name__)


class WatermarkSession:
    def __init__(
        self,
        settings: WatermarkSettings = DEFAULT_SETTINGS,
        font_path: Optional[str] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.image: Optional[SourceImage] = None
        self.settings = settings
        self.font_path = font_path
        self.max_upload_bytes = max_upload_bytes

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def can_export(self) -> bool:
        return self.image is not None and self.settings.enabled

    def upload(self, data: bytes, mime_type: Optional[str], name: str = "") -> SourceImage:
        """Decode and install a new image, releasing the previous one.

        On UnsupportedFormat / DecodeError the current image is left untouched.
        """
        new_image = load_upload(data, mime_type, name=name, max_bytes=self.max_upload_bytes)
        self.replace_image(new_image)
        return new_image

    def replace_image(self, image: SourceImage) -> None:
        old = self.image
        self.image = image
        if old is not None and old is not image:
            old.close()

    def update_settings(self, settings: WatermarkSettings) -> None:
        self.settings = settings

    def update(self, **changes: Any) -> WatermarkSettings:
        self.settings = self.settings.replace(**changes)
        return self.settings

    def reset(self, keep_settings: bool = True) -> None:
        """Release the current image; settings survive unless asked otherwise."""
        if self.image is not None:
            self.image.close()
            logger.info("Released %s", self.image.name or "image")
        self.image = None
        if not keep_settings:
            self.settings = DEFAULT_SETTINGS

    def render(self) -> Optional[Image.Image]:
        if self.image is None:
            return None
        return render(self.image, self.settings, font_path=self.font_path)

    def export(self, fmt: str) -> Tuple[str, bytes]:
        """Return (file name, bytes) for the current render."""
        if self.image is None:
            raise ExportUnavailable("Upload an image before exporting")
        if not self.settings.enabled:
            raise ExportUnavailable("Enter watermark text before exporting")
        surface = self.render()
        return export_filename(fmt), export_surface(surface, fmt)
