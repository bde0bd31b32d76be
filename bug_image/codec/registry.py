#!/usr/bin/env python3
# bug_image/codec/registry.py
"""
Pillow format plugin for BUG text images.

Nothing is registered on import. Call register() once during application
start-up; afterwards Image.open() recognises BUG files starting with either
sentinel glyph and Image.save(..., format="BUG") or a ".bug" filename writes
them through the encoder.

    from bug_image.codec import registry
    registry.register()
    img = Image.open("gopher.bug")          # mode "L", dots black on white
    img.save("gopher.png")
"""

from __future__ import annotations

import logging
from typing import IO

from PIL import Image, ImageFile

from bug_image.buffer import BRAILLE_OFFSET
from bug_image.codec.decoder import Decoder
from bug_image.codec.encoder import Encoder
from bug_image.errors import FormatError
from bug_image.threshold import DEFAULT_THRESHOLD, ThresholdPolicy

__all__ = ["BugImageFile", "register", "is_registered", "FORMAT", "MAGIC"]

log = logging.getLogger(__name__)

FORMAT = "BUG"
EXTENSION = ".bug"
MIME = "text/x-bug"

# UTF-8 of the empty cell and of the left-column-full cell.
MAGIC = (
    chr(BRAILLE_OFFSET).encode("utf-8"),
    chr(0x283F).encode("utf-8"),
)

_registered = False


def _accept(prefix: bytes) -> bool:
    return prefix[:3] in MAGIC


class _BugPyDecoder(ImageFile.PyDecoder):
    """Hands the already-decoded raster to Pillow's raw unpacker."""
    _pulls_fd = True

    def decode(self, buffer):
        raster = self.args[0]
        self.set_as_raw(raster)
        return -1, 0


class BugImageFile(ImageFile.ImageFile):
    format = FORMAT
    format_description = "Braille Unicode Graphic"

    def _open(self) -> None:
        if not _accept(self.fp.read(3)):
            raise SyntaxError("not a BUG file")
        self.fp.seek(0)
        try:
            buf = Decoder(self.fp).decode()
        except FormatError as e:
            raise SyntaxError(str(e)) from e
        self.info["cells"] = buf.cell_size
        self._mode = "L"
        self._size = buf.size
        raster = buf.to_image().tobytes()
        self.tile = [("bug", (0, 0) + buf.size, 0, (raster,))]


def _save(im: Image.Image, fp: IO[bytes], filename) -> None:
    threshold = im.encoderinfo.get("threshold", DEFAULT_THRESHOLD)
    if not isinstance(threshold, ThresholdPolicy):
        threshold = ThresholdPolicy(int(threshold))
    if im.encoderinfo.get("inverse"):
        threshold = threshold.inverse()
    Encoder(fp, threshold).encode(im)


def register() -> None:
    """Register the BUG format with Pillow. Safe to call more than once."""
    global _registered
    if _registered:
        return
    Image.register_open(FORMAT, BugImageFile, _accept)
    Image.register_decoder("bug", _BugPyDecoder)
    Image.register_save(FORMAT, _save)
    Image.register_extension(FORMAT, EXTENSION)
    Image.register_mime(FORMAT, MIME)
    _registered = True
    log.debug("registered %s format with Pillow", FORMAT)


def is_registered() -> bool:
    return _registered
