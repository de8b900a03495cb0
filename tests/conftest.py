import io

import pytest
from PIL import Image

from photo_watermark.upload import SourceImage


def image_bytes(size=(400, 300), color=(255, 255, 255, 255), fmt="PNG") -> bytes:
    img = Image.new("RGBA", size, color)
    if fmt == "JPEG":
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_source(size=(400, 300), color=(255, 255, 255, 255), name="photo.png") -> SourceImage:
    return SourceImage(image=Image.new("RGBA", size, color), name=name, mime_type="image/png")


@pytest.fixture
def white_source():
    return make_source()


@pytest.fixture
def gradient_source():
    img = Image.linear_gradient("L").resize((320, 240)).convert("RGBA")
    return SourceImage(image=img, name="gradient.png", mime_type="image/png")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "WATERMARK_FONT_PATH",
        "WATERMARK_DEFAULT_FORMAT",
        "WATERMARK_MAX_UPLOAD_MB",
        "WATERMARK_PREVIEW_WIDTH",
        "WATERMARK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
