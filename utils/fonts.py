"""Font resolution and metrics on top of reportlab.

The 14 standard PDF fonts (Helvetica, Times, Courier...) need no files. Any
other family name is looked up as a TrueType file in the usual font
directories and registered with reportlab under that name.
"""
import logging
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

logger = logging.getLogger(__name__)

FALLBACK_FONT = "Helvetica"

# Standard directories where TTF fonts live on Linux/macOS
_FONT_SEARCH_DIRS = [
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("/Library/Fonts"),
    Path.home() / ".local/share/fonts",
    Path.home() / ".fonts",
]


class FontMetrics:
    """Width measurement for one resolved font."""

    def __init__(self, font_name: str):
        self.font_name = font_name

    def width(self, text: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, self.font_name, size)

    def __repr__(self) -> str:
        return f"FontMetrics({self.font_name!r})"


def resolve_font(font_name: str) -> str:
    """Return a reportlab font name usable for ``font_name``.

    Falls back to Helvetica (with a warning) when no TTF file is found.
    """
    try:
        pdfmetrics.getFont(font_name)  # standard or already registered
        return font_name
    except KeyError:
        pass

    path = find_font_file(font_name)
    if path is None:
        logger.warning("No font file found for '%s' — using %s", font_name, FALLBACK_FONT)
        return FALLBACK_FONT
    try:
        pdfmetrics.registerFont(TTFont(font_name, str(path)))
    except TTFError as exc:
        logger.warning("Could not register font %s (%s) — using %s", path, exc, FALLBACK_FONT)
        return FALLBACK_FONT
    logger.debug("Registered font '%s' from %s", font_name, path)
    return font_name


def find_font_file(font_name: str) -> Path | None:
    """Scan font directories for a TTF whose stem matches ``font_name``.

    Accepts "DejaVu Sans" → DejaVuSans.ttf or DejaVu-Sans.ttf and
    "DejaVu Sans-Bold" → DejaVuSans-Bold.ttf, but not DejaVuSansMono.ttf.
    """
    wanted = {
        font_name.lower().replace(" ", ""),
        font_name.lower().replace(" ", "-"),
    }
    for base in _FONT_SEARCH_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.TTF"):
            for path in sorted(base.rglob(ext)):
                if path.stem.lower() in wanted:
                    return path
    return None


def metrics_for(font_name: str) -> FontMetrics:
    return FontMetrics(resolve_font(font_name))
