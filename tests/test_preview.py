"""Tests for the terminal preview fragments and styles."""
from prompt_toolkit.styles import Style

from bug_image.buffer import PixelBuffer
from bug_image.config import Config
from bug_image.preview import build_fragments
from bug_image.styles import make_style, resolve_theme


def test_fragments_one_run_per_row():
    buf = PixelBuffer.from_cells([[0xFF, 0x00], [0x01, 0x02]])
    frags = build_fragments(buf, caption="demo")
    assert frags[0] == ("class:caption", "demo\n")
    rows = [text for style, text in frags if style == "class:dots"]
    assert rows == list(buf.rows())
    assert "".join(text for _, text in frags[1:]) == buf.text()


def test_fragments_without_caption():
    buf = PixelBuffer.new(2, 4)
    assert build_fragments(buf) == [("class:dots", chr(0x2800)), ("", "\n")]


def test_theme_resolution(config_path, monkeypatch):
    cfg = Config.load(create_if_missing=False)
    monkeypatch.delenv("TERM_THEME", raising=False)
    assert resolve_theme(cfg) == "dark"
    monkeypatch.setenv("TERM_THEME", "light")
    assert resolve_theme(cfg) == "light"
    cfg.update({"preview": {"theme": "dark"}})
    assert resolve_theme(cfg) == "dark"


def test_make_style(config_path):
    cfg = Config.load(create_if_missing=False)
    assert isinstance(make_style(cfg), Style)
    cfg.update({"preview": {"theme": "light"}})
    light = make_style(cfg)
    assert ("dots", "fg:#101010") in light.style_rules
    cfg.update({"preview": {"color": False}})
    assert make_style(cfg).style_rules == []


def test_style_classes_match_fragments(config_path):
    cfg = Config.load(create_if_missing=False)
    for theme in ("light", "dark"):
        cfg.update({"preview": {"theme": theme, "color": True}})
        assert {cls for cls, _ in make_style(cfg).style_rules} == {"dots", "caption"}
