#!/usr/bin/env python3
# bug_image/preview.py
"""
Terminal preview of a PixelBuffer.

Builds prompt_toolkit FormattedText fragments (style, text) so the same
frame can be printed or embedded in a larger layout.
"""

from __future__ import annotations

from typing import List, Optional, TextIO, Tuple

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.styles import Style

from bug_image.buffer import PixelBuffer

StyleRun = Tuple[str, str]                # (style, text)

__all__ = ["build_fragments", "print_preview"]


def build_fragments(buf: PixelBuffer, caption: Optional[str] = None) -> List[StyleRun]:
    """One "class:dots" run per cell row, optional caption line first."""
    frags: List[StyleRun] = []
    if caption:
        frags.append(("class:caption", caption + "\n"))
    for line in buf.rows():
        frags.append(("class:dots", line))
        frags.append(("", "\n"))
    return frags


def print_preview(
    buf: PixelBuffer,
    style: Style,
    caption: Optional[str] = None,
    file: Optional[TextIO] = None,
) -> None:
    print_formatted_text(
        FormattedText(build_fragments(buf, caption)),
        style=style,
        end="",
        file=file,
    )
