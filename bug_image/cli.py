#!/usr/bin/env python3
# bug_image/cli.py
"""
Entry point for the bug-image command.

    bug-image encode photo.png -o photo.bug -t 120
    bug-image decode photo.bug -o photo.png
    bug-image view https://example.org/logo.png --inverse
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from bug_image.codec import registry
from bug_image.codec.decoder import Decoder
from bug_image.codec.encoder import Encoder, convert
from bug_image.config import Config
from bug_image.errors import BugError
from bug_image.logging_conf import setup_logging
from bug_image.preview import print_preview
from bug_image.sources import load_image
from bug_image.styles import make_style
from bug_image.threshold import ThresholdPolicy
from bug_image.version import version_info

log = logging.getLogger("bug_image.cli")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="bug-image", description="Braille Unicode Graphic converter")
    p.add_argument("-v", "--verbose", action="store_true", help="verbose mode")
    p.add_argument("--config", default=None, help="path to config JSON (default: per-user config)")
    p.add_argument("--version", action="version", version=version_info())
    sub = p.add_subparsers(dest="command", required=True)

    def threshold_opts(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("-t", "--threshold", type=int, default=None,
                        help="luminance cutoff; negative values invert (default from config, 100)")
        sp.add_argument("--inverse", action="store_true", help="invert dots")

    enc = sub.add_parser("encode", help="convert an image (path or URL) to BUG text")
    enc.add_argument("image", help="path or URL of the image file (png, jpeg, gif, ...)")
    enc.add_argument("-o", "--out", default=None, help="path to output file (default stdout)")
    threshold_opts(enc)

    dec = sub.add_parser("decode", help="convert a BUG file to a regular image")
    dec.add_argument("bug", help="path to the .bug file")
    dec.add_argument("-o", "--out", required=True, help="path to output image")
    dec.add_argument("--format", default=None, help="Pillow format name (default from extension)")

    view = sub.add_parser("view", help="print an image or BUG file as Braille art")
    view.add_argument("image", help="path or URL of an image or .bug file")
    view.add_argument("--no-color", action="store_true", help="plain text output")
    threshold_opts(view)
    return p


def _policy(cfg: Config, args: argparse.Namespace) -> ThresholdPolicy:
    policy = cfg.threshold_policy() if args.threshold is None else ThresholdPolicy(args.threshold)
    return policy.inverse() if args.inverse else policy


def cmd_encode(cfg: Config, args: argparse.Namespace) -> None:
    img = load_image(args.image, network=cfg["network"])
    log.info("Successfully decoded %r as %s", args.image, img.format)
    policy = _policy(cfg, args)
    if args.out:
        with open(args.out, "wb") as f:
            Encoder(f, policy).encode(img)
    else:
        Encoder(sys.stdout.buffer, policy).encode(img)
        sys.stdout.buffer.flush()


def cmd_decode(cfg: Config, args: argparse.Namespace) -> None:
    with open(args.bug, "rb") as f:
        buf = Decoder(f, cfg.threshold_policy()).decode()
    log.info("Decoded %r: %dx%d pixels", args.bug, buf.width, buf.height)
    buf.to_image().save(args.out, format=args.format)


def cmd_view(cfg: Config, args: argparse.Namespace) -> None:
    img = load_image(args.image, network=cfg["network"])
    buf = convert(img, _policy(cfg, args))
    if args.no_color or not sys.stdout.isatty():
        sys.stdout.write(buf.text())
        sys.stdout.flush()
        return
    print_preview(buf, make_style(cfg))


COMMANDS = {
    "encode": cmd_encode,
    "decode": cmd_decode,
    "view": cmd_view,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config, create_if_missing=False)
    setup_logging(cfg, "DEBUG" if args.verbose else None)
    registry.register()
    try:
        COMMANDS[args.command](cfg, args)
    except (BugError, OSError) as e:
        print(f"bug-image: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
