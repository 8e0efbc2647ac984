"""Font discovery and text rendering helpers."""

from __future__ import annotations

import logging
import os
import threading
from typing import Dict, List, Optional

from fpdf import FPDF  # type: ignore

from .config import FONT_PATH_ENV
from .formatting import ELLIPSIS
from .theme import DEFAULT_FONT_FAMILY, Color, resolve_font_family, to_rgb255

logger = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

FONT_DIRS = [
    os.path.join(_PROJECT_ROOT, "fonts"),
    "/usr/share/fonts/truetype/dejavu",
    "/usr/share/fonts/dejavu",
    "/usr/share/fonts/TTF",
    "/Library/Fonts",
]

# Unicode TTF files per family and style; core PDF fonts are the fallback.
FAMILY_FILES: Dict[str, Dict[str, str]] = {
    "helvetica": {
        "": "DejaVuSans.ttf",
        "B": "DejaVuSans-Bold.ttf",
        "I": "DejaVuSans-Oblique.ttf",
        "BI": "DejaVuSans-BoldOblique.ttf",
    },
    "times": {
        "": "DejaVuSerif.ttf",
        "B": "DejaVuSerif-Bold.ttf",
        "I": "DejaVuSerif-Italic.ttf",
        "BI": "DejaVuSerif-BoldItalic.ttf",
    },
    "courier": {
        "": "DejaVuSansMono.ttf",
        "B": "DejaVuSansMono-Bold.ttf",
        "I": "DejaVuSansMono-Oblique.ttf",
        "BI": "DejaVuSansMono-BoldOblique.ttf",
    },
}
CORE_FAMILIES = {"helvetica": "helvetica", "times": "times", "courier": "courier"}

# Core fonts only cover Latin-1.
LATIN1_REPLACEMENTS = {
    "…": "...",
    "—": "-",
    "–": "-",
    "•": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
}

STYLE_FALLBACKS = {
    "": [""],
    "B": ["B", ""],
    "I": ["I", ""],
    "BI": ["BI", "B", "I", ""],
}


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


def find_family_paths(family: str) -> Dict[str, str]:
    files = FAMILY_FILES.get(family, FAMILY_FILES[DEFAULT_FONT_FAMILY])
    paths: Dict[str, str] = {}
    for style, filename in files.items():
        path = find_font_path(
            FONT_PATH_ENV[style],
            [os.path.join(directory, filename) for directory in FONT_DIRS],
        )
        if path:
            paths[style] = path
    return paths


FONT_INIT_LOCK = threading.Lock()


class FontManager:
    """One font family in four styles, Unicode TTF when available.

    Missing TTF styles degrade to the closest registered style (bold is
    faked by overprinting); with no TTF at all the matching core PDF font is
    used and text is reduced to Latin-1.
    """

    FAMILY = "InvoiceFont"

    def __init__(self, pdf: FPDF, family: str = DEFAULT_FONT_FAMILY) -> None:
        self.pdf = pdf
        self.family_key = resolve_font_family(family)
        self.styles = {"", "B", "I", "BI"}
        self.unicode = False

        self.family = CORE_FAMILIES[self.family_key]

        paths = find_family_paths(self.family_key)
        if "" not in paths:
            return

        family = f"{self.FAMILY}-{self.family_key}"
        registered = set()
        try:
            with FONT_INIT_LOCK:
                for style, path in paths.items():
                    self.pdf.add_font(family, style, path)
                    registered.add(style)
        except Exception as exc:
            if "" not in registered:
                logger.warning("Falling back to core font %s: %s", self.family, exc)
                return
        self.family = family
        self.styles = registered
        self.unicode = True

    @property
    def ellipsis(self) -> str:
        return ELLIPSIS if self.unicode else "..."

    def resolve_style(self, style: str) -> str:
        for candidate in STYLE_FALLBACKS.get(style, [""]):
            if candidate in self.styles:
                return candidate
        return ""

    def prepare(self, text: str) -> str:
        if self.unicode:
            return text
        for char, replacement in LATIN1_REPLACEMENTS.items():
            text = text.replace(char, replacement)
        return text.encode("latin-1", "replace").decode("latin-1")

    def set_font(self, size: float, style: str = "") -> str:
        resolved = self.resolve_style(style)
        self.pdf.set_font(self.family, resolved, size)
        return resolved

    def text_width(self, text: str, size: float, style: str = "") -> float:
        self.set_font(size, style)
        return self.pdf.get_string_width(self.prepare(text))

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        size: float,
        color: Color,
        style: str = "",
    ) -> None:
        self.pdf.set_text_color(*to_rgb255(color))
        resolved = self.set_font(size, style)
        text = self.prepare(text)
        if "B" in style and "B" not in resolved:
            self.pdf.text(x, y, text)
            self.pdf.text(x + 0.4, y, text)
        else:
            self.pdf.text(x, y, text)

