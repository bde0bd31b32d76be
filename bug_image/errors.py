#!/usr/bin/env python3
# bug_image/errors.py
"""
Exception types raised by the BUG codec.

I/O failures from sources and sinks are not wrapped: they surface as the
OSError the stream raised.
"""

from __future__ import annotations

import io

__all__ = [
    "BugError",
    "FormatError",
    "UnsupportedOperation",
    "SourceError",
]


class BugError(Exception):
    """Base class for every error raised by bug_image itself."""


class FormatError(BugError, ValueError):
    """Structurally invalid BUG text. The whole input must be treated as corrupt."""


class UnsupportedOperation(BugError, io.UnsupportedOperation):
    """Requested operation cannot be served by the BUG format."""


class SourceError(BugError):
    """An image reference could not be opened or fetched."""

    def __init__(self, ref: str, reason: str):
        super().__init__(f"cannot load image {ref!r}: {reason}")
        self.ref = ref
        self.reason = reason
