#!/usr/bin/env python3
# bug_image/version.py
"""
Version and build metadata for the BUG image codec.
"""

__version__ = "1.2.0"
__build__ = "2026-10-17"
__license__ = "MIT"

def version_info() -> str:
    """Return human-readable version string."""
    return f"bug-image v{__version__} (build {__build__})"
