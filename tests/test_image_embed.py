"""Tests for the image embedder."""
import pytest
from PIL import Image
from pypdf import PdfReader

from pdf_service.conversion.errors import DecodeFailure, IOFailure, UnsupportedImageFormat
from pdf_service.conversion.strategies import embed_image

from .helpers import make_image


def _single_page(path):
    reader = PdfReader(str(path))
    assert len(reader.pages) == 1
    return reader.pages[0]


def test_png_becomes_single_page_sized_to_pixels(tmp_path):
    src = make_image(tmp_path / "photo.png", size=(200, 100))
    out = tmp_path / "photo.pdf"

    embed_image(src, out)

    page = _single_page(out)
    assert float(page.mediabox.width) == 200
    assert float(page.mediabox.height) == 100
    assert len(page.images) == 1


@pytest.mark.parametrize("name", ["shot.jpg", "shot.jpeg", "SHOT.JPG"])
def test_jpeg_variants_are_embedded(tmp_path, name):
    src = make_image(tmp_path / name, size=(64, 48), fmt="JPEG")
    out = tmp_path / "shot.pdf"

    embed_image(src, out)

    page = _single_page(out)
    assert (float(page.mediabox.width), float(page.mediabox.height)) == (64, 48)


def test_png_with_alpha_channel(tmp_path):
    src = tmp_path / "logo.png"

    Image.new("RGBA", (30, 20), color=(255, 0, 0, 128)).save(src)
    out = tmp_path / "logo.pdf"

    embed_image(src, out)

    page = _single_page(out)
    assert (float(page.mediabox.width), float(page.mediabox.height)) == (30, 20)


@pytest.mark.parametrize("name,fmt", [("anim.gif", "GIF"), ("diagram.bmp", "BMP")])
def test_gif_and_bmp_are_rejected_not_decoded(tmp_path, name, fmt):
    src = make_image(tmp_path / name, size=(10, 10), fmt=fmt)
    out = tmp_path / "out.pdf"

    with pytest.raises(UnsupportedImageFormat) as exc:
        embed_image(src, out)

    assert "JPG or PNG" in exc.value.message
    assert not out.exists()


def test_gif_rejected_even_when_bytes_are_garbage(tmp_path):
    src = tmp_path / "broken.gif"
    src.write_bytes(b"not an image at all")

    with pytest.raises(UnsupportedImageFormat):
        embed_image(src, tmp_path / "out.pdf")


def test_malformed_png_is_a_decode_failure(tmp_path):
    src = tmp_path / "broken.png"
    src.write_bytes(b"\x89PNG\r\n\x1a\n" + b"garbage" * 10)

    with pytest.raises(DecodeFailure) as exc:
        embed_image(src, tmp_path / "out.pdf")

    assert exc.value.__cause__ is not None


def test_text_named_as_jpeg_is_a_decode_failure(tmp_path):
    src = tmp_path / "fake.jpg"
    src.write_text("hello", encoding="utf-8")

    with pytest.raises(DecodeFailure):
        embed_image(src, tmp_path / "out.pdf")


def test_missing_image_is_an_io_failure(tmp_path):
    with pytest.raises(IOFailure):
        embed_image(tmp_path / "absent.png", tmp_path / "out.pdf")


def test_decompression_bomb_is_a_decode_failure(tmp_path, monkeypatch):
    src = make_image(tmp_path / "huge.png", size=(200, 100))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    out = tmp_path / "out.pdf"

    with pytest.raises(DecodeFailure):
        embed_image(src, out)

    assert not out.exists()


def test_source_suffix_overrides_staged_name(tmp_path):
    src = make_image(tmp_path / "upload", size=(12, 34), fmt="PNG")
    out = tmp_path / "out.pdf"

    embed_image(src, out, source_suffix=".PNG")

    page = _single_page(out)
    assert (float(page.mediabox.width), float(page.mediabox.height)) == (12, 34)


def test_source_suffix_is_checked_before_decoding(tmp_path):
    src = make_image(tmp_path / "upload.png", size=(8, 8), fmt="PNG")

    with pytest.raises(UnsupportedImageFormat):
        embed_image(src, tmp_path / "out.pdf", source_suffix=".bmp")
