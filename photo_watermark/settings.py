"""Watermark settings record.

The UI keeps exactly one ``WatermarkSettings`` per loaded image and replaces it
wholesale whenever a control changes. Ranges in ``UI_RANGES`` are what the
sidebar sliders allow; the core accepts any numeric value, behavior outside
these ranges is simply untested.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Tuple

from PIL import ImageColor

from .errors import SettingsError

# (min, max, step) per numeric option
UI_RANGES: Dict[str, Tuple[float, float, float]] = {
    "font_size": (12, 72, 1),
    "opacity": (0.1, 0.8, 0.05),
    "rotation": (-90, 90, 5),
    "spacing": (50, 300, 10),
}

# camelCase names accepted by from_mapping
_ALIASES = {
    "fontSize": "font_size",
}


@dataclass(frozen=True)
class WatermarkSettings:
    text: str = ""
    font_size: float = 24
    opacity: float = 0.3
    rotation: float = -30
    spacing: float = 100
    color: str = "#000000"

    @property
    def enabled(self) -> bool:
        return bool(self.text)

    def replace(self, **changes: Any) -> "WatermarkSettings":
        """Return a new record with ``changes`` applied; validation as in from_mapping."""
        return WatermarkSettings.from_mapping({**asdict(self), **changes})

    def rgb(self) -> Tuple[int, int, int]:
        return parse_color(self.color)

    def rgba(self) -> Tuple[int, int, int, int]:
        r, g, b = self.rgb()
        alpha = int(round(255 * max(0.0, min(1.0, self.opacity))))
        return (r, g, b, alpha)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "WatermarkSettings":
        """Build settings from a loose mapping (snake_case or camelCase keys).

        Missing keys fall back to defaults, unknown keys are ignored.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            key = _ALIASES.get(key, key)
            if key in _FIELDS:
                values[key] = value
        base = WatermarkSettings()
        text = values.get("text", base.text)
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise SettingsError(f"text must be a string, got {type(text).__name__}")
        color = values.get("color", base.color)
        parse_color(color)
        return WatermarkSettings(
            text=text,
            font_size=_number("font_size", values.get("font_size", base.font_size)),
            opacity=_number("opacity", values.get("opacity", base.opacity)),
            rotation=_number("rotation", values.get("rotation", base.rotation)),
            spacing=_number("spacing", values.get("spacing", base.spacing)),
            color=color,
        )


_FIELDS = set(WatermarkSettings.__dataclass_fields__)

DEFAULT_SETTINGS = WatermarkSettings()


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise SettingsError(f"{name} must be a number, got bool")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise SettingsError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise SettingsError(f"{name} must be finite, got {value!r}")
    return number


def parse_color(value: Any) -> Tuple[int, int, int]:
    """Return (r, g, b) for a hex or named color."""
    if not isinstance(value, str):
        raise SettingsError(f"color must be a string, got {value!r}")
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        raise SettingsError(f"unrecognised color {value!r}") from None
    return rgb[0], rgb[1], rgb[2]


def safe_color_hex(rgb_like) -> str:
    """Return #rrggbb from a 3-seq; fallback to #000000 on error.

    Streamlit color_picker requires a string; ensure ints 0-255.
    """
    try:
        r, g, b = rgb_like[:3]
        r = int(max(0, min(255, r)))
        g = int(max(0, min(255, g)))
        b = int(max(0, min(255, b)))
        return f"#{r:02x}{g:02x}{b:02x}"
    except (TypeError, ValueError):
        return "#000000"
