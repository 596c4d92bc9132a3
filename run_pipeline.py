#!/usr/bin/env python3
"""Typeset a story file into a 3-page PDF booklet from the command line.

Usage:
    python run_pipeline.py --story cuento.txt
    python run_pipeline.py --story cuento.txt --title "El dragón" \\
        --image https://example.org/1.png --image art/2.jpg --output out.pdf

Local image paths are inlined as data URIs; URLs are downloaded.
"""
import argparse
import base64
import logging
import mimetypes
import re
import sys
import unicodedata
from pathlib import Path

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parent))

from errors import BookletError
from models.booklet import BookletRequest
from models.design import DesignSystem
from pipeline.booklet import build_booklet
from settings import Settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("run_pipeline")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--story", type=Path, required=True, help="UTF-8 text file with the story")
    parser.add_argument("--title", default=None, help="Story title (default from settings)")
    parser.add_argument("--image", action="append", default=[], dest="images",
                        help="Illustration URL, data URI or local file; repeat for pages 1-3")
    parser.add_argument("--output", type=Path, default=None,
                        help="Output PDF path (default: <project_dir>/output/<title>.pdf)")
    args = parser.parse_args(argv)

    settings = Settings()
    logging.getLogger().setLevel(settings.log_level)
    design = DesignSystem.load_or_default(settings.design_yaml_path)

    try:
        story_text = args.story.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read story file %s: %s", args.story, exc)
        return 1

    request = BookletRequest(
        title=args.title,
        story_text=story_text,
        images=[_image_ref(ref) for ref in args.images],
    )
    output_path = args.output or _output_path(settings, request.title or settings.default_title)

    try:
        with httpx.Client(timeout=settings.image_fetch_timeout) as client:
            pdf_bytes = build_booklet(request, settings, design, client)
    except BookletError as exc:
        logger.error("%s", exc)
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(pdf_bytes)
    logger.info("=== Done → %s ===", output_path)
    return 0


def _image_ref(ref: str) -> str:
    """Pass URLs and data URIs through; inline existing local files."""
    if ref.startswith(("http://", "https://", "data:")):
        return ref
    path = Path(ref)
    if not path.is_file():
        return ref  # rejected later as an unsupported reference
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{payload}"


def _output_path(settings: Settings, title: str) -> Path:
    return settings.output_dir / f"{_slugify(title)}.pdf"


def _slugify(text: str) -> str:
    """Convert a title to a safe ASCII filename slug."""
    text = unicodedata.normalize("NFKD", text.lower())
    text = text.encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text[:50].strip("-") or "story-booklet"


if __name__ == "__main__":
    sys.exit(main())
