"""Tiled text watermarks for photos: planning, rendering and export."""

from .errors import (
    DecodeError,
    EncodeError,
    ExportUnavailable,
    InvalidGeometry,
    SettingsError,
    UnsupportedFormat,
    WatermarkError,
)
from .exporter import EXPORT_FORMATS, export_filename, export_surface, export_surface_async
from .renderer import render, render_preview
from .session import WatermarkSession
from .settings import DEFAULT_SETTINGS, WatermarkSettings
from .tiling import TilePlan, plan_tiles
from .upload import SUPPORTED_MIME_TYPES, SourceImage, load_upload

__all__ = [
    "DEFAULT_SETTINGS",
    "EXPORT_FORMATS",
    "SUPPORTED_MIME_TYPES",
    "DecodeError",
    "EncodeError",
    "ExportUnavailable",
    "InvalidGeometry",
    "SettingsError",
    "SourceImage",
    "TilePlan",
    "UnsupportedFormat",
    "WatermarkError",
    "WatermarkSession",
    "WatermarkSettings",
    "export_filename",
    "export_surface",
    "export_surface_async",
    "load_upload",
    "plan_tiles",
    "render",
    "render_preview",
]
