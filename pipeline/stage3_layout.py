"""Stage 3: Line breaking — flow paragraphs through the text boxes.

Greedy, word-level fill with a character-level fallback for words wider
than the box. The cursor (box index + baseline y) only ever moves forward:
down a box, then to the next box, then to the next page.

Invariants of every emitted line:
  - ``line.y - line_height(size) >= box.y_bottom`` of its box
  - its measured width is at most its box's width, unless it is a single
    character that is wider than the box on its own

The cursor is settled onto the box that will receive the next line *before*
that line is measured, so a line built beside an illustration is never
dropped into a wider box and vice versa.
"""
import logging
from typing import Callable, Iterator

from models.booklet import LayoutBox, LayoutLine, LayoutResult
from pipeline.stage1_normalize import split_paragraphs
from utils.fonts import FontMetrics

logger = logging.getLogger(__name__)

LINE_HEIGHT_RATIO = 1.35
PARAGRAPH_GAP_RATIO = 0.6


def line_height(font_size: float) -> float:
    return font_size * LINE_HEIGHT_RATIO


def run(
    text: str,
    metrics: FontMetrics,
    font_size: float,
    boxes: list[LayoutBox],
) -> LayoutResult:
    """Lay out ``text`` at ``font_size``.

    Returns every line that could be placed; ``overflow`` is True when text
    was left over after the last box filled up.
    """
    lh = line_height(font_size)
    cursor = _Cursor(boxes, lh)
    try:
        for paragraph in split_paragraphs(text):
            _flow_paragraph(paragraph, cursor, metrics, font_size)
            cursor.y -= lh * PARAGRAPH_GAP_RATIO
    except _BoxesExhausted:
        logger.debug("%.1fpt: overflow after %d line(s)", font_size, len(cursor.lines))
        return LayoutResult(lines=cursor.lines, overflow=True)

    logger.debug("%.1fpt: %d line(s), fits", font_size, len(cursor.lines))
    return LayoutResult(lines=cursor.lines, overflow=False)


def split_long_word(
    word: str,
    metrics: FontMetrics,
    font_size: float,
    max_width: Callable[[], float],
) -> Iterator[str]:
    """Yield maximal prefixes of ``word`` that fit the current width.

    ``max_width`` is asked again before every piece, so a caller that places
    each piece as it is yielded may move to a box of another width in between.
    Each piece holds at least one character, so a glyph wider than the box
    still comes out as a piece of its own.
    """
    remaining = word
    while remaining:
        piece = _longest_fitting_prefix(remaining, metrics, font_size, max_width())
        yield piece
        remaining = remaining[len(piece):]


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------

class _BoxesExhausted(Exception):
    pass


class _Cursor:
    def __init__(self, boxes: list[LayoutBox], line_height: float):
        self.boxes = boxes
        self.line_height = line_height
        self.index = 0
        self.y = boxes[0].y_top if boxes else 0.0
        self.lines: list[LayoutLine] = []

    @property
    def box(self) -> LayoutBox | None:
        if self.index < len(self.boxes):
            return self.boxes[self.index]
        return None

    def settle(self) -> LayoutBox:
        """Move to the first box with room for one more line and return it."""
        while self.box is not None and self.y - self.line_height < self.box.y_bottom:
            self.index += 1
            if self.box is not None:
                self.y = self.box.y_top
        if self.box is None:
            raise _BoxesExhausted
        return self.box

    def available_width(self) -> float:
        return self.settle().width

    def emit(self, text: str) -> None:
        box = self.settle()
        self.lines.append(LayoutLine(
            text=text,
            page_index=box.page_index,
            box_index=self.index,
            x=box.x,
            y=self.y,
        ))
        self.y -= self.line_height


# ---------------------------------------------------------------------------
# Paragraph flow
# ---------------------------------------------------------------------------

def _flow_paragraph(
    paragraph: str,
    cursor: _Cursor,
    metrics: FontMetrics,
    font_size: float,
) -> None:
    buffer = ""
    for word in paragraph.split():
        max_width = cursor.available_width()
        candidate = f"{buffer} {word}" if buffer else word
        if metrics.width(candidate, font_size) <= max_width:
            buffer = candidate
            continue

        if buffer:
            cursor.emit(buffer)
            buffer = ""
            max_width = cursor.available_width()

        if metrics.width(word, font_size) <= max_width:
            buffer = word
            continue

        for piece in split_long_word(word, metrics, font_size, cursor.available_width):
            cursor.emit(piece)

    if buffer:
        cursor.emit(buffer)


def _longest_fitting_prefix(
    text: str,
    metrics: FontMetrics,
    font_size: float,
    max_width: float,
) -> str:
    prefix = text[0]
    for ch in text[1:]:
        if metrics.width(prefix + ch, font_size) > max_width:
            break
        prefix += ch
    return prefix
