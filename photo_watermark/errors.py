"""Error kinds raised by the watermark core and caught at the UI / CLI boundary."""

from __future__ import annotations


class WatermarkError(Exception):
    """Base class for every recoverable watermark error."""


class UnsupportedFormat(WatermarkError):
    """Upload media type is not one of image/jpeg, image/png, image/webp."""


class DecodeError(WatermarkError):
    """Uploaded bytes could not be decoded into a bitmap."""


class InvalidGeometry(WatermarkError, ValueError):
    """Tiling step sizes are not strictly positive."""


class EncodeError(WatermarkError):
    """Surface could not be encoded to the requested format."""


class ExportUnavailable(WatermarkError):
    """Export requested without a loaded image or without watermark text."""


class SettingsError(WatermarkError, ValueError):
    """A settings value could not be interpreted."""
