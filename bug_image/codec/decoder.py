#!/usr/bin/env python3
# bug_image/codec/decoder.py
"""
BUG decoder.

The whole source is read before parsing: the image width comes from the
glyph count of the first line and the height from the number of lines, so
there is no header to peek at. decode_config() exists only to say so.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, List, Optional, TextIO, Union

import numpy as np

from bug_image.buffer import BRAILLE_OFFSET, PixelBuffer
from bug_image.errors import FormatError, UnsupportedOperation
from bug_image.threshold import DEFAULT_THRESHOLD, ThresholdPolicy

__all__ = ["Decoder", "decode", "decodes", "decode_config"]

log = logging.getLogger(__name__)

Source = Union[BinaryIO, TextIO]


def _split_rows(data: Union[bytes, str]) -> List[str]:
    if isinstance(data, (bytes, bytearray, memoryview)):
        text = bytes(data).decode("utf-8", errors="replace")
    else:
        text = data
    text = text.strip()
    if not text:
        return []
    return text.split("\n")


class Decoder:
    """Parses BUG text from a source into a PixelBuffer."""

    def __init__(self, source: Source, threshold: ThresholdPolicy = DEFAULT_THRESHOLD):
        self.source = source
        self.threshold = threshold

    def with_threshold(self, threshold: ThresholdPolicy) -> "Decoder":
        self.threshold = threshold
        return self

    def decode(self) -> PixelBuffer:
        return self.parse(self.source.read())

    def parse(self, data: Union[bytes, str]) -> PixelBuffer:
        rows = _split_rows(data)
        if not rows:
            raise FormatError("empty BUG image")

        width = len(rows[0])
        height = len(rows)
        img = PixelBuffer.new(width * 2, height * 4, self.threshold)

        if height > img.cell_height:
            raise FormatError(f"invalid BUG image: {height} rows exceed grid height {img.cell_height}")

        for row, line in enumerate(rows):
            if len(line) > img.cell_width:
                raise FormatError(
                    f"invalid BUG image: row {row} has {len(line)} cells, expected at most {img.cell_width}"
                )
            # Out-of-range code points wrap to a byte rather than failing.
            cells = np.array([(ord(ch) - BRAILLE_OFFSET) & 0xFF for ch in line], dtype=np.uint8)
            img.load_cells(cells[None, :], row_offset=row)

        log.debug("decoded BUG image %dx%d cells", width, height)
        return img


def decode(source: Source, threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> PixelBuffer:
    return Decoder(source, threshold).decode()


def decodes(data: Union[bytes, str], threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> PixelBuffer:
    """Decode from an in-memory bytes or str object."""
    return Decoder(None, threshold).parse(data)


def decode_config(source: Optional[Source] = None):
    raise UnsupportedOperation("header-only decode is not supported for BUG: a full read is required, use decode()")
