#!/usr/bin/env python3
# bug_image/styles.py
"""
Style definitions for the terminal preview.
Provides light, dark, and auto themes for prompt_toolkit.
"""

import os

from prompt_toolkit.styles import Style

from bug_image.config import Config

BASE_DARK = {
    "dots": "fg:#e8e8e8",
    "caption": "fg:#00ff00 bold",
}
BASE_LIGHT = {
    "dots": "fg:#101010",
    "caption": "fg:#006600 bold",
}


def resolve_theme(cfg: Config) -> str:
    theme = cfg["preview"].get("theme", "auto")
    if theme in ("light", "dark"):
        return theme
    # Auto-detect via environment
    if os.getenv("TERM_THEME", "").lower() == "light":
        return "light"
    return "dark"


def make_style(cfg: Config) -> Style:
    if not cfg["preview"].get("color", True):
        return Style.from_dict({})
    if resolve_theme(cfg) == "light":
        return Style.from_dict(BASE_LIGHT)
    return Style.from_dict(BASE_DARK)
