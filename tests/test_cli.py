"""End-to-end tests for the bug-image command."""
import pytest
from PIL import Image

from bug_image import cli
from bug_image.codec.decoder import decodes
from bug_image.codec.encoder import convert, encodes
from bug_image.threshold import DEFAULT_THRESHOLD


@pytest.fixture
def png_file(tmp_path, png_bytes):
    path = tmp_path / "square.png"
    path.write_bytes(png_bytes)
    return path


def run(config_path, *args):
    return cli.main(["--config", str(config_path), *args])


def test_encode_to_file(tmp_path, config_path, png_file):
    out = tmp_path / "square.bug"
    assert run(config_path, "encode", str(png_file), "-o", str(out)) == 0
    with Image.open(png_file) as img:
        assert out.read_bytes() == encodes(img)
    # black 2x4 square at pixel (2, 2) straddles cells (1, 0) and (1, 1)
    buf = decodes(out.read_bytes())
    assert buf.cell_size == (3, 2)
    assert buf.cell_at(1, 0) == 0x04 | 0x20 | 0x40 | 0x80
    assert buf.cell_at(1, 1) == 0x01 | 0x08 | 0x02 | 0x10


def test_encode_to_stdout(capsys, config_path, png_file):
    assert run(config_path, "encode", str(png_file)) == 0
    with Image.open(png_file) as img:
        assert capsys.readouterr().out == convert(img).text()


def test_encode_inverse_and_threshold(capsys, config_path, png_file):
    assert run(config_path, "encode", str(png_file), "--inverse") == 0
    with Image.open(png_file) as img:
        expected = convert(img, DEFAULT_THRESHOLD.inverse()).text()
    assert capsys.readouterr().out == expected

    assert run(config_path, "encode", str(png_file), "-t", "256") == 0
    assert set(capsys.readouterr().out) == {chr(0x28FF), "\n"}


def test_decode_to_png(tmp_path, config_path, png_file):
    bug = tmp_path / "square.bug"
    out = tmp_path / "back.png"
    assert run(config_path, "encode", str(png_file), "-o", str(bug)) == 0
    assert run(config_path, "decode", str(bug), "-o", str(out)) == 0
    with Image.open(out) as img, Image.open(png_file) as src:
        assert img.format == "PNG"
        assert img.size == src.size
        assert convert(img) == convert(src)


def test_view_plain(capsys, tmp_path, config_path, png_file):
    assert run(config_path, "view", str(png_file), "--no-color") == 0
    printed = capsys.readouterr().out
    bug = tmp_path / "square.bug"
    bug.write_text(printed, encoding="utf-8")
    assert run(config_path, "view", str(bug)) == 0
    assert capsys.readouterr().out == printed


def test_missing_input(capsys, tmp_path, config_path):
    assert run(config_path, "encode", str(tmp_path / "nope.png")) == 1
    assert "nope.png" in capsys.readouterr().err


def test_decode_corrupt(capsys, tmp_path, config_path):
    bug = tmp_path / "bad.bug"
    bug.write_bytes(b"   \n")
    assert run(config_path, "decode", str(bug), "-o", str(tmp_path / "x.png")) == 1
    assert "empty BUG image" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        cli.main(["--version"])
    assert info.value.code == 0
    assert "bug-image v" in capsys.readouterr().out
