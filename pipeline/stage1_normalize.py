"""Stage 1: Normalize — turn the raw request into display-ready text.

  - Title: stripped, default applied, uppercased for the imprint.
  - Body: a first line repeating the title is dropped, a leading
    ``META:<text>`` line becomes the subtitle, paragraphs are split on blank
    lines and re-joined with a single blank line between them.

Pure: no I/O.
"""
import logging
import re

from errors import ValidationError
from models.booklet import BookletRequest, NormalizedStory
from settings import Settings

logger = logging.getLogger(__name__)

_META_LINE = re.compile(r"^\s*META:([^\n]*)(?:\n+|$)", re.IGNORECASE)
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def run(request: BookletRequest, settings: Settings) -> NormalizedStory:
    """Validate and normalize the request.

    Raises ValidationError if ``story_text`` is missing or blank.
    """
    body = (request.story_text or "").replace("\r\n", "\n").strip()
    if not body:
        raise ValidationError("story_text is required and must not be empty")

    title = to_imprint((request.title or "").strip() or settings.default_title)

    body = _drop_repeated_title(body, title)
    subtitle, body = _extract_meta(body)
    if not subtitle:
        subtitle = f"BY {settings.product_name}"

    # May be empty when the body only repeated the title or held a META line;
    # the booklet is then just the imprint
    paragraphs = split_paragraphs(body)
    if not paragraphs:
        logger.warning("No body text left after removing title and META lines")
    if settings.uppercase_body:
        paragraphs = [to_imprint(p) for p in paragraphs]

    story = NormalizedStory(title=title, subtitle=to_imprint(subtitle), paragraphs=paragraphs)
    logger.info("Stage 1 complete: %r, %d paragraph(s)", story.title, len(paragraphs))
    return story


def to_imprint(text: str) -> str:
    """Uppercase imprint styling used for the title, subtitle and (optionally) body."""
    return text.upper()


def split_paragraphs(text: str) -> list[str]:
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def _drop_repeated_title(body: str, title: str) -> str:
    first_line, _, rest = body.partition("\n")
    if first_line.strip().casefold() == title.casefold():
        logger.debug("Dropping first line that repeats the title")
        return rest.lstrip()
    return body


def _extract_meta(body: str) -> tuple[str, str]:
    """Return (subtitle, remaining body). Subtitle is empty when there is no META line."""
    match = _META_LINE.match(body)
    if not match:
        return "", body
    return match.group(1).strip(), body[match.end():].lstrip()
