"""Logo loading from a local file or a remote URL.

Every failure here is swallowed: a missing file, a non-200 response, a
timeout or an undecodable image all mean "render without a logo".
"""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import requests
from PIL import Image, UnidentifiedImageError

from .config import LOGO_MAX_BYTES, LOGO_TIMEOUT_MS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogoImage:
    data: bytes
    width: int
    height: int

    def scaled(self, display_height: float) -> Tuple[float, float]:
        scale = display_height / float(self.height)
        return self.width * scale, self.height * scale

    def stream(self) -> io.BytesIO:
        return io.BytesIO(self.data)


def is_remote(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_remote_logo(
    url: str,
    timeout_seconds: float = LOGO_TIMEOUT_MS / 1000.0,
    max_bytes: int = LOGO_MAX_BYTES,
) -> Optional[bytes]:
    try:
        resp = requests.get(url, timeout=timeout_seconds)
    except requests.RequestException as exc:
        logger.debug("Logo fetch failed for %s: %s", url, exc)
        return None
    if resp.status_code != 200:
        logger.debug("Logo fetch for %s returned HTTP %d", url, resp.status_code)
        return None
    content = resp.content
    if not content or len(content) > max_bytes:
        logger.debug("Logo from %s is empty or larger than %d bytes", url, max_bytes)
        return None
    return content


def read_local_logo(path: str, max_bytes: int = LOGO_MAX_BYTES) -> Optional[bytes]:
    if not path or not os.path.isfile(path):
        return None
    try:
        if os.path.getsize(path) > max_bytes:
            logger.debug("Logo file %s is larger than %d bytes", path, max_bytes)
            return None
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as exc:
        logger.debug("Logo file %s is unreadable: %s", path, exc)
        return None


def decode_logo(data: bytes) -> Optional[LogoImage]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.debug("Logo image could not be decoded: %s", exc)
        return None
    if not width or not height:
        return None
    return LogoImage(data=data, width=width, height=height)


def load_logo(source: Optional[str], timeout_seconds: Optional[float] = None) -> Optional[LogoImage]:
    source = (source or "").strip()
    if not source:
        return None
    if is_remote(source):
        if timeout_seconds is None:
            data = fetch_remote_logo(source)
        else:
            data = fetch_remote_logo(source, timeout_seconds=timeout_seconds)
    else:
        data = read_local_logo(source)
    if data is None:
        return None
    return decode_logo(data)
