from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer)", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r (must be positive)", name, raw)
        return default
    return value


@dataclass(frozen=True)
class AppConfig:
    font_path: Optional[str]
    default_format: str
    max_upload_mb: int
    preview_width: int
    log_level: str

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @staticmethod
    def load() -> "AppConfig":
        load_dotenv()
        default_format = os.getenv("WATERMARK_DEFAULT_FORMAT", "png").strip().lower()
        if default_format == "jpg":
            default_format = "jpeg"
        if default_format not in ("png", "jpeg", "webp"):
            logger.warning("Unknown default format %r, using png", default_format)
            default_format = "png"
        return AppConfig(
            font_path=os.getenv("WATERMARK_FONT_PATH") or None,
            default_format=default_format,
            max_upload_mb=_int_env("WATERMARK_MAX_UPLOAD_MB", 50),
            preview_width=_int_env("WATERMARK_PREVIEW_WIDTH", 800),
            log_level=os.getenv("WATERMARK_LOG_LEVEL", "INFO").strip().upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
