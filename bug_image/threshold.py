#!/usr/bin/env python3
# bug_image/threshold.py
"""
Threshold policy: reduces any colour to a single Braille dot decision.

A policy is a signed luminance cutoff. Positive values mark everything darker
than the cutoff as opaque (dot set). Negative values use the absolute cutoff
and invert the result, which is how "inverse" rendering is expressed.

Colours are accepted in the shapes Pillow's getpixel() returns: a single
int/float for L/1/I/F images, or a tuple of 1-4 channels (L, LA, RGB, RGBA).
Alpha is premultiplied before luminance, so a fully transparent pixel is black.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Sequence, Union

import numpy as np

__all__ = [
    "Dot",
    "ThresholdPolicy",
    "DEFAULT_THRESHOLD",
    "luminance",
    "to_rgba",
]

Color = Union["Dot", int, float, Sequence[int]]


class Dot(enum.Enum):
    """Binary state of one sub-pixel."""
    TRANSPARENT = 0
    OPAQUE = 1

    def __invert__(self) -> "Dot":
        return Dot.TRANSPARENT if self is Dot.OPAQUE else Dot.OPAQUE


# ITU-R 601-2 in 16.16 fixed point, same weights as Pillow's convert("L").
# The weights sum to 1 << 16 so gray input maps to itself exactly.
_LUMA_R, _LUMA_G, _LUMA_B = 19595, 38470, 7471


def to_rgba(color: Any) -> np.ndarray:
    """Normalise a single getpixel()-style colour to a (4,) int32 RGBA array."""
    if isinstance(color, (int, float, np.integer, np.floating)):
        v = int(min(max(color, 0), 255))
        return np.array([v, v, v, 255], dtype=np.int32)
    ch = [int(min(max(c, 0), 255)) for c in color]
    if len(ch) == 1:
        return np.array([ch[0], ch[0], ch[0], 255], dtype=np.int32)
    if len(ch) == 2:
        return np.array([ch[0], ch[0], ch[0], ch[1]], dtype=np.int32)
    if len(ch) == 3:
        return np.array(ch + [255], dtype=np.int32)
    if len(ch) == 4:
        return np.array(ch, dtype=np.int32)
    raise TypeError(f"unsupported colour {color!r}")


def luminance(rgba: np.ndarray) -> np.ndarray:
    """
    rgba: (..., 4) array, straight (non-premultiplied) alpha.
    Returns (...) int32 luminance in [0, 255] of the alpha-premultiplied colour.
    """
    px = rgba.astype(np.int32)
    a = px[..., 3]
    r = (px[..., 0] * a + 127) // 255
    g = (px[..., 1] * a + 127) // 255
    b = (px[..., 2] * a + 127) // 255
    return (r * _LUMA_R + g * _LUMA_G + b * _LUMA_B + 0x8000) >> 16


@dataclass(frozen=True)
class ThresholdPolicy:
    """
    Signed luminance cutoff.

    value >= 0: opaque iff luminance < value.
    value <  0: opaque iff luminance >= -value (inverse mode).
    """
    value: int = 100

    @property
    def cutoff(self) -> int:
        return abs(self.value)

    @property
    def inverted(self) -> bool:
        return self.value < 0

    def inverse(self) -> "ThresholdPolicy":
        return ThresholdPolicy(-self.value)

    def convert(self, color: Color) -> Dot:
        """Binarise one colour. Sentinel Dot values skip the luminance step."""
        if color is Dot.OPAQUE:
            dot = Dot.OPAQUE
        elif color is Dot.TRANSPARENT:
            dot = Dot.TRANSPARENT
        else:
            y = int(luminance(to_rgba(color)))
            dot = Dot.OPAQUE if y < self.cutoff else Dot.TRANSPARENT
        return ~dot if self.inverted else dot

    def mask(self, rgba: np.ndarray) -> np.ndarray:
        """Vectorised convert(): (H, W, 4) RGBA -> (H, W) bool, True where opaque."""
        opaque = luminance(rgba) < self.cutoff
        return ~opaque if self.inverted else opaque

    def __int__(self) -> int:
        return self.value


DEFAULT_THRESHOLD = ThresholdPolicy()
