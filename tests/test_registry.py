"""Tests for the Pillow format plugin."""
import io

import pytest
from PIL import Image

from bug_image.buffer import PixelBuffer
from bug_image.codec import registry
from bug_image.codec.encoder import convert, encodes
from bug_image.threshold import ThresholdPolicy

from conftest import EMPTY, FULL


@pytest.fixture(autouse=True)
def registered():
    registry.register()
    yield


def test_register_is_idempotent():
    registry.register()
    registry.register()
    assert registry.is_registered()
    assert Image.registered_extensions()[".bug"] == "BUG"
    assert Image.MIME["BUG"] == "text/x-bug"


@pytest.mark.parametrize("prefix, ok", [
    (EMPTY.encode("utf-8") + b"rest", True),
    (chr(0x283F).encode("utf-8"), True),
    (FULL.encode("utf-8"), False),
    (b"\x89PNG\r\n\x1a\n", False),
    (b"", False),
])
def test_accept_sentinels(prefix, ok):
    assert registry._accept(prefix) is ok


def test_open_bug_text():
    text = EMPTY + FULL + "\n" + chr(0x2801) + EMPTY + "\n"
    img = Image.open(io.BytesIO(text.encode("utf-8")))
    assert img.format == "BUG"
    assert img.mode == "L"
    assert img.size == (4, 8)
    assert img.info["cells"] == (2, 2)
    img.load()
    assert img.getpixel((0, 0)) == 255  # paper
    assert img.getpixel((2, 0)) == 0    # ink
    assert img.getpixel((0, 4)) == 0
    assert img.getpixel((1, 4)) == 255


def test_opened_image_reencodes_identically():
    text = (EMPTY + chr(0x2895) + FULL + "\n" + chr(0x283F) * 3 + "\n").encode("utf-8")
    img = Image.open(io.BytesIO(text))
    assert encodes(img) == text


def test_save_through_pillow(random_buffer):
    img = random_buffer.to_image()
    out = io.BytesIO()
    img.save(out, format="BUG")
    assert out.getvalue() == encodes(random_buffer)


def test_save_with_threshold_options():
    img = Image.new("L", (2, 4), 150)
    out = io.BytesIO()
    img.save(out, format="BUG", threshold=200)
    assert out.getvalue() == (FULL + "\n").encode("utf-8")
    out = io.BytesIO()
    img.save(out, format="BUG", threshold=ThresholdPolicy(200), inverse=True)
    assert out.getvalue() == (EMPTY + "\n").encode("utf-8")


def test_save_by_extension(tmp_path, checkerboard):
    path = tmp_path / "board.bug"
    checkerboard.save(path)
    assert path.read_bytes() == encodes(convert(checkerboard))


def test_png_round_trip_through_pillow(tmp_path, random_buffer):
    png = tmp_path / "img.png"
    random_buffer.to_image().save(png)
    with Image.open(png) as img:
        assert convert(img) == random_buffer
