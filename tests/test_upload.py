import io

import pytest
from PIL import Image

from conftest import image_bytes
from photo_watermark.errors import DecodeError, UnsupportedFormat
from photo_watermark.upload import guess_mime_type, load_path, load_upload


@pytest.mark.parametrize("mime", ["image/png", "IMAGE/PNG", " image/png "])
def test_png_upload_decodes(mime):
    source = load_upload(image_bytes((64, 48)), mime, name="a.png")
    assert (source.width, source.height) == (64, 48)
    assert source.image.mode == "RGBA"
    assert source.mime_type == "image/png"
    assert source.name == "a.png"


def test_jpeg_upload_decodes():
    source = load_upload(image_bytes((30, 20), fmt="JPEG"), "image/jpeg")
    assert source.size == (30, 20)


def test_webp_upload_decodes():
    source = load_upload(image_bytes((30, 20), fmt="WEBP"), "image/webp")
    assert source.size == (30, 20)


@pytest.mark.parametrize("mime", ["text/plain", "image/gif", "image/bmp", "", None])
def test_other_media_types_are_rejected(mime):
    with pytest.raises(UnsupportedFormat):
        load_upload(image_bytes(), mime)


def test_gif_rejected_even_when_decodable():
    buf = io.BytesIO()
    Image.new("P", (8, 8)).save(buf, format="GIF")
    with pytest.raises(UnsupportedFormat):
        load_upload(buf.getvalue(), "image/gif")


def test_garbage_bytes_fail_to_decode():
    with pytest.raises(DecodeError):
        load_upload(b"definitely not a png", "image/png")


def test_truncated_image_fails_to_decode():
    buf = io.BytesIO()
    Image.effect_noise((200, 200), 64).convert("RGB").save(buf, format="JPEG")
    data = buf.getvalue()
    with pytest.raises(DecodeError):
        load_upload(data[: len(data) // 3], "image/jpeg")


def test_empty_upload_fails():
    with pytest.raises(DecodeError):
        load_upload(b"", "image/png")


def test_size_limit():
    data = image_bytes((64, 64))
    with pytest.raises(DecodeError, match="limit"):
        load_upload(data, "image/png", max_bytes=len(data) - 1)
    assert load_upload(data, "image/png", max_bytes=len(data)).size == (64, 64)


def test_exif_orientation_is_applied():
    img = Image.new("RGB", (40, 20), (200, 10, 10))
    exif = img.getexif()
    exif[0x0112] = 6  # rotate 90 on display
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif)
    source = load_upload(buf.getvalue(), "image/jpeg")
    assert source.size == (20, 40)


def test_close_releases_bitmap():
    source = load_upload(image_bytes((8, 8)), "image/png")
    source.close()
    with pytest.raises(ValueError):
        source.image.getpixel((0, 0))


def test_guess_mime_type():
    assert guess_mime_type("photo.JPG") == "image/jpeg"
    assert guess_mime_type("photo.webp") == "image/webp"
    assert guess_mime_type("notes.txt") == "text/plain"
    assert guess_mime_type("noext") == "application/octet-stream"


def test_load_path(tmp_path):
    path = tmp_path / "shot.webp"
    path.write_bytes(image_bytes((12, 10), fmt="WEBP"))
    assert load_path(path).size == (12, 10)

    notes = tmp_path / "notes.txt"
    notes.write_text("hello")
    with pytest.raises(UnsupportedFormat):
        load_path(notes)

    with pytest.raises(DecodeError):
        load_path(tmp_path / "missing.png")
