#!/usr/bin/env python3
# bug_image/sources.py
"""
Image sources for the converter.

Opens local files, raw bytes, binary streams and http(s) URLs through Pillow.
URL fetches use a requests Session with urllib3 Retry, configured from the
"network" section of the config.
"""

from __future__ import annotations

import io
import logging
import os
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from PIL import Image, UnidentifiedImageError

from bug_image.errors import SourceError

__all__ = ["make_session", "fetch_bytes", "load_image", "is_url"]

log = logging.getLogger(__name__)

ImageRef = Union[str, os.PathLike, bytes, io.IOBase]


def is_url(ref: Any) -> bool:
    return isinstance(ref, str) and ref.lower().startswith(("http://", "https://"))


def make_session(network: Optional[Dict[str, Any]] = None) -> requests.Session:
    """HTTP session with retry, mirroring the network config section."""
    network = network or {}
    retries = int(network.get("retries", 3))
    session = requests.Session()
    session.headers["User-Agent"] = network.get("user_agent", "bug-image")
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        backoff_factor=float(network.get("retry_backoff_s", 0.3)),
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def fetch_bytes(
    url: str,
    session: Optional[requests.Session] = None,
    network: Optional[Dict[str, Any]] = None,
) -> bytes:
    network = network or {}
    session = session or make_session(network)
    timeout = (
        float(network.get("connect_timeout_s", 5.0)),
        float(network.get("read_timeout_s", 15.0)),
    )
    log.debug("fetching %s", url)
    try:
        r = session.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise SourceError(url, str(e)) from e
    if not r.content:
        raise SourceError(url, "empty response")
    return r.content


def load_image(
    ref: ImageRef,
    session: Optional[requests.Session] = None,
    network: Optional[Dict[str, Any]] = None,
) -> Image.Image:
    """
    Open ref with Pillow and fully load it.
    Raises SourceError when the reference cannot be read or identified.
    """
    name = ref if isinstance(ref, (str, os.PathLike)) else f"<{type(ref).__name__}>"
    if is_url(ref):
        fp: Any = io.BytesIO(fetch_bytes(ref, session, network))
    elif isinstance(ref, (bytes, bytearray)):
        fp = io.BytesIO(bytes(ref))
    else:
        fp = ref
    try:
        img = Image.open(fp)
        img.load()
    except FileNotFoundError as e:
        raise SourceError(str(name), "no such file") from e
    except UnidentifiedImageError as e:
        raise SourceError(str(name), "unrecognised image format") from e
    except OSError as e:
        raise SourceError(str(name), str(e)) from e
    log.debug("loaded %s as %s %s %dx%d", name, img.format, img.mode, img.width, img.height)
    return img
