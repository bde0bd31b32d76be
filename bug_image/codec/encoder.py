#!/usr/bin/env python3
# bug_image/codec/encoder.py
"""
BUG encoder.

convert() reduces any supported image to a PixelBuffer with a threshold
policy; Encoder writes the buffer's cells as UTF-8 Braille text, one line per
cell row, each terminated by a single newline.

Supported sources for convert():
- PixelBuffer (policy swapped in place, no copy)
- PIL.Image.Image of any mode
- numpy arrays shaped (H, W), (H, W, 1..4)
- anything with .size and .getpixel((x, y))
"""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, TextIO, Union

import numpy as np
from PIL import Image

from bug_image.buffer import PixelBuffer
from bug_image.threshold import DEFAULT_THRESHOLD, ThresholdPolicy

__all__ = ["Encoder", "convert", "encode", "encodes"]

log = logging.getLogger(__name__)

Sink = Union[BinaryIO, TextIO]


def _array_to_rgba(arr: np.ndarray) -> np.ndarray:
    """(H, W) or (H, W, C) numeric array -> (H, W, 4) uint8 RGBA."""
    a = np.clip(np.asarray(arr), 0, 255).astype(np.uint8)
    if a.ndim == 2:
        a = a[..., None]
    if a.ndim != 3 or not 1 <= a.shape[2] <= 4:
        raise TypeError(f"unsupported array shape {np.shape(arr)}")
    h, w, c = a.shape
    if c == 1:
        gray = a[..., 0]
        return np.dstack([gray, gray, gray, np.full((h, w), 255, np.uint8)])
    if c == 2:
        gray = a[..., 0]
        return np.dstack([gray, gray, gray, a[..., 1]])
    if c == 3:
        return np.dstack([a, np.full((h, w), 255, np.uint8)])
    return a


def _wide_gray(img: Image.Image) -> np.ndarray:
    """
    I;16*, I and F images as 0-255 gray. Integer modes carry 16-bit samples
    and keep their high byte; F is already on the 0-255 scale.
    """
    arr = np.asarray(img)
    if img.mode == "F":
        return np.rint(arr)
    return arr.astype(np.int64) >> 8


def convert(source: Any, threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> PixelBuffer:
    """
    Reduce source to a PixelBuffer using threshold.

    Source pixels are drawn over a fresh buffer: each one replaces the
    destination pixel, no blending. A PixelBuffer source only has its
    threshold replaced and is returned as-is.
    """
    if isinstance(source, PixelBuffer):
        source.threshold = threshold
        return source

    if isinstance(source, Image.Image):
        if source.mode.startswith("I") or source.mode == "F":
            rgba = _array_to_rgba(_wide_gray(source))
        else:
            rgba = np.asarray(source.convert("RGBA"), dtype=np.uint8)
        buf = PixelBuffer.new(source.width, source.height, threshold)
        buf.paint(threshold.mask(rgba))
    elif isinstance(source, np.ndarray):
        rgba = _array_to_rgba(source)
        buf = PixelBuffer.new(rgba.shape[1], rgba.shape[0], threshold)
        buf.paint(threshold.mask(rgba))
    elif hasattr(source, "getpixel") and hasattr(source, "size"):
        w, h = source.size
        buf = PixelBuffer.new(w, h, threshold)
        for y in range(h):
            for x in range(w):
                buf.set(x, y, source.getpixel((x, y)))
    else:
        raise TypeError(f"cannot convert {type(source).__name__} to a BUG image")

    log.debug("converted %s to %dx%d cells (threshold %d)",
              type(source).__name__, buf.cell_width, buf.cell_height, threshold.value)
    return buf


class Encoder:
    """Writes BUG text to a sink. Holds no state besides its configuration."""

    def __init__(self, sink: Sink, threshold: ThresholdPolicy = DEFAULT_THRESHOLD):
        self.sink = sink
        self.threshold = threshold

    def with_threshold(self, threshold: ThresholdPolicy) -> "Encoder":
        self.threshold = threshold
        return self

    def encode(self, image: Any) -> PixelBuffer:
        """
        Convert image with the encoder's threshold and write it row by row.
        A failing write aborts the rest of the image and propagates.
        Returns the buffer that was written.
        """
        buf = convert(image, self.threshold)
        text_sink = isinstance(self.sink, io.TextIOBase)
        for line in buf.rows():
            line += "\n"
            self.sink.write(line if text_sink else line.encode("utf-8"))
        log.debug("encoded %d rows of %d glyphs", buf.cell_height, buf.cell_width)
        return buf


def encode(sink: Sink, image: Any, threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> PixelBuffer:
    return Encoder(sink, threshold).encode(image)


def encodes(image: Any, threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> bytes:
    """Encode to an in-memory bytes object."""
    out = io.BytesIO()
    Encoder(out, threshold).encode(image)
    return out.getvalue()
