"""Shared fixtures for bug_image tests."""
import io

import numpy as np
import pytest
from PIL import Image

from bug_image.buffer import PixelBuffer


FULL = chr(0x28FF)
EMPTY = chr(0x2800)


@pytest.fixture
def checkerboard():
    """2x4 L image: luminance 0 where (x + y) is even, 255 elsewhere."""
    img = Image.new("L", (2, 4), 255)
    for y in range(4):
        for x in range(2):
            if (x + y) % 2 == 0:
                img.putpixel((x, y), 0)
    return img


@pytest.fixture
def random_buffer():
    """8x12 pixel buffer (4x3 cells) with a fixed pseudo-random pattern."""
    rng = np.random.default_rng(1234)
    mask = rng.random((12, 8)) < 0.5
    buf = PixelBuffer.new(8, 12)
    for y in range(12):
        for x in range(8):
            buf.set(x, y, 0 if mask[y, x] else 255)
    return buf


@pytest.fixture
def png_bytes():
    """Small RGB PNG: black square on white, 6x8 pixels."""
    img = Image.new("RGB", (6, 8), (255, 255, 255))
    for y in range(2, 6):
        for x in range(2, 4):
            img.putpixel((x, y), (0, 0, 0))
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Isolated config location; nothing touches the real user config."""
    path = tmp_path / "config" / "bug_image.json"
    monkeypatch.setenv("BUG_IMAGE_CONFIG", str(path))
    return path
