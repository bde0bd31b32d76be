#!/usr/bin/env python3
# bug_image/buffer.py
"""
PixelBuffer: monochrome pixel grid with its Braille cell packing.

Each Braille glyph covers 2x4 pixels. The buffer keeps both views in sync:
- pixels: (height, width) uint8, 255 where the dot is set, 0 elsewhere.
- cells:  (cell_height, cell_width) uint8, one Braille bit pattern per cell.

The surface mimics the pixel accessors of PIL.Image.Image (size, mode,
getpixel, putpixel) without inheriting from it. to_image() gives a real
Pillow image when one is needed.
"""

from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np
from PIL import Image

from bug_image.threshold import DEFAULT_THRESHOLD, Color, Dot, ThresholdPolicy

__all__ = [
    "PixelBuffer",
    "DOT_BITS",
    "BRAILLE_OFFSET",
    "BRAILLE_FULL",
    "Bounds",
]

Bounds = Tuple[int, int, int, int]  # (left, top, right, bottom), right/bottom exclusive

# Braille bit positions:
#  dots: 1 4
#        2 5
#        3 6
#        7 8
# Unicode = 0x2800 | bits
DOT_BITS = (
    (0x01, 0x08),  # row 0: col 0 -> dot1, col 1 -> dot4
    (0x02, 0x10),  # row 1: col 0 -> dot2, col 1 -> dot5
    (0x04, 0x20),  # row 2: col 0 -> dot3, col 1 -> dot6
    (0x40, 0x80),  # row 3: col 0 -> dot7, col 1 -> dot8
)
_DOT_BITS_ARR = np.array(DOT_BITS, dtype=np.uint8)  # (4, 2)

BRAILLE_OFFSET = 0x2800  # empty cell
BRAILLE_FULL = 0x28FF

ON = 255
OFF = 0


def _cell_dims(width: int, height: int) -> Tuple[int, int]:
    return -(-width // 2), -(-height // 4)


def pack_cells(pixels: np.ndarray) -> np.ndarray:
    """(H, W) raw pixels -> (ceil(H/4), ceil(W/2)) packed cells."""
    h, w = pixels.shape
    cw, ch = _cell_dims(w, h)
    padded = np.zeros((ch * 4, cw * 2), dtype=np.uint8)
    padded[:h, :w] = pixels != OFF
    blocks = padded.reshape(ch, 4, cw, 2) * _DOT_BITS_ARR[None, :, None, :]
    return blocks.sum(axis=(1, 3), dtype=np.uint16).astype(np.uint8)


def unpack_cells(cells: np.ndarray, width: int, height: int) -> np.ndarray:
    """(CH, CW) packed cells -> (height, width) raw pixels, cropped."""
    ch, cw = cells.shape
    bits = (cells[:, None, :, None] & _DOT_BITS_ARR[None, :, None, :]) != 0
    full = bits.reshape(ch * 4, cw * 2).astype(np.uint8) * ON
    return np.ascontiguousarray(full[:height, :width])


class PixelBuffer:
    """
    Monochrome image stored as raw pixels plus Braille cells.

    bounds are in pixel space. Cells are addressed from (0, 0) regardless of
    the pixel origin; the cell grid rounds up on a partial last column/row.
    """

    mode = "L"

    def __init__(self, bounds: Bounds, threshold: ThresholdPolicy = DEFAULT_THRESHOLD):
        x0, y0, x1, y1 = (int(v) for v in bounds)
        if x1 < x0 or y1 < y0:
            raise ValueError(f"invalid bounds {bounds!r}")
        self.bounds: Bounds = (x0, y0, x1, y1)
        self.threshold = threshold
        self.width = x1 - x0
        self.height = y1 - y0
        self.cell_width, self.cell_height = _cell_dims(self.width, self.height)
        self.pixels = np.zeros((self.height, self.width), dtype=np.uint8)
        self.cells = np.zeros((self.cell_height, self.cell_width), dtype=np.uint8)

    @classmethod
    def new(cls, width: int, height: int, threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> "PixelBuffer":
        return cls((0, 0, width, height), threshold)

    @classmethod
    def from_cells(
        cls,
        cells: np.ndarray,
        threshold: ThresholdPolicy = DEFAULT_THRESHOLD,
    ) -> "PixelBuffer":
        """Build a buffer whose pixel size is exactly 2x4 per given cell."""
        cells = np.asarray(cells, dtype=np.uint8)
        ch, cw = cells.shape
        buf = cls.new(cw * 2, ch * 4, threshold)
        buf.load_cells(cells)
        return buf

    @classmethod
    def from_image(cls, img, threshold: ThresholdPolicy = DEFAULT_THRESHOLD) -> "PixelBuffer":
        from bug_image.codec.encoder import convert
        return convert(img, threshold)

    # -------------
    # Geometry
    # -------------

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def cell_size(self) -> Tuple[int, int]:
        return self.cell_width, self.cell_height

    def contains(self, x: int, y: int) -> bool:
        x0, y0, x1, y1 = self.bounds
        return x0 <= x < x1 and y0 <= y < y1

    # -------------
    # Pixel access
    # -------------

    def set(self, x: int, y: int, color: Color) -> None:
        """
        Binarise color with the active threshold and store it at (x, y).
        Pixels outside the bounds are silently discarded.
        """
        if not self.contains(x, y):
            return
        lx, ly = x - self.bounds[0], y - self.bounds[1]
        bit = DOT_BITS[ly % 4][lx % 2]
        cy, cx = ly // 4, lx // 2
        if self.threshold.convert(color) is Dot.OPAQUE:
            self.pixels[ly, lx] = ON
            self.cells[cy, cx] |= bit
        else:
            self.pixels[ly, lx] = OFF
            self.cells[cy, cx] &= ~bit & 0xFF

    def putpixel(self, xy: Tuple[int, int], value: Color) -> None:
        self.set(xy[0], xy[1], value)

    def getpixel(self, xy: Tuple[int, int]) -> int:
        x, y = xy
        if not self.contains(x, y):
            raise IndexError(f"pixel ({x}, {y}) outside {self.bounds}")
        return int(self.pixels[y - self.bounds[1], x - self.bounds[0]])

    def dot_at(self, x: int, y: int) -> Dot:
        return Dot.OPAQUE if self.getpixel((x, y)) == ON else Dot.TRANSPARENT

    def clear(self) -> None:
        """Reset every pixel and cell to transparent."""
        self.pixels.fill(OFF)
        self.cells.fill(0)

    def paint(self, opaque: np.ndarray, origin: Tuple[int, int] = (0, 0)) -> None:
        """
        Draw a boolean mask over the buffer, top-left corner at pixel origin.
        Each covered pixel is replaced, the part outside the bounds is dropped.
        Equivalent to calling set() for every mask pixel.
        """
        mask = np.asarray(opaque, dtype=bool)
        x0, y0, x1, y1 = self.bounds
        ox, oy = origin
        left, top = max(ox, x0), max(oy, y0)
        right = min(ox + mask.shape[1], x1)
        bottom = min(oy + mask.shape[0], y1)
        if right <= left or bottom <= top:
            return
        src = mask[top - oy:bottom - oy, left - ox:right - ox]
        self.pixels[top - y0:bottom - y0, left - x0:right - x0] = np.where(src, ON, OFF)
        self.cells = pack_cells(self.pixels)

    # -------------
    # Cell access
    # -------------

    def cell_at(self, cx: int, cy: int) -> int:
        if not (0 <= cx < self.cell_width and 0 <= cy < self.cell_height):
            return 0
        return int(self.cells[cy, cx])

    def glyph_at(self, cx: int, cy: int) -> int:
        """Braille code point of cell (cx, cy); the empty glyph when out of range."""
        return BRAILLE_OFFSET + self.cell_at(cx, cy)

    def load_cells(self, cells: np.ndarray, row_offset: int = 0) -> None:
        """Overwrite cell rows starting at row_offset and rebuild their pixels."""
        cells = np.asarray(cells, dtype=np.uint8)
        rows, cols = cells.shape
        if row_offset + rows > self.cell_height or cols > self.cell_width:
            raise ValueError(
                f"cells {cols}x{rows} at row {row_offset} exceed grid {self.cell_width}x{self.cell_height}"
            )
        self.cells[row_offset:row_offset + rows, :cols] = cells
        py0 = row_offset * 4
        py1 = min(py0 + rows * 4, self.height)
        px1 = min(cols * 2, self.width)
        self.pixels[py0:py1, :px1] = unpack_cells(cells, px1, py1 - py0)

    def rows(self) -> Iterator[str]:
        """Yield one string of Braille glyphs per cell row."""
        for row in self.cells:
            yield "".join(chr(BRAILLE_OFFSET + int(v)) for v in row)

    def text(self) -> str:
        return "".join(line + "\n" for line in self.rows())

    # -------------
    # Pillow bridge
    # -------------

    def to_image(self) -> Image.Image:
        """Mode "L" Pillow image, dots black on white."""
        if not self.pixels.size:
            return Image.new("L", self.size, ON)
        return Image.fromarray(ON - self.pixels)

    def copy(self) -> "PixelBuffer":
        other = PixelBuffer(self.bounds, self.threshold)
        other.pixels = self.pixels.copy()
        other.cells = self.cells.copy()
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.size == other.size
            and np.array_equal(self.pixels, other.pixels)
            and np.array_equal(self.cells, other.cells)
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"PixelBuffer(bounds={self.bounds}, cells={self.cell_width}x{self.cell_height}, "
            f"threshold={self.threshold.value})"
        )
