"""Stage 4: Font-size back-off — find the largest body size that fits.

Sizes are tried from the preferred body size downwards in 1pt steps until
Stage 3 reports no overflow or the minimum size is reached. If the text
still overflows at the minimum, the last placed line is marked with an
ellipsis so the reader can see the story was cut. This is a degradation,
never an error.
"""
import logging
from typing import Callable

from models.booklet import FittedLayout, LayoutBox, LayoutLine
from models.design import DesignSystem
from pipeline import stage3_layout
from utils.fonts import FontMetrics

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
_SIZE_STEP = 1.0

BoxFactory = Callable[[float], list[LayoutBox]]


def run(
    text: str,
    metrics: FontMetrics,
    box_factory: BoxFactory,
    design: DesignSystem,
) -> FittedLayout:
    """Lay out ``text`` at the largest size in [min, preferred] that fits.

    ``box_factory`` receives the trial font size and returns the boxes for
    that attempt.
    """
    typo = design.typography
    attempts: list[float] = []
    size = typo.body.size_pt

    while True:
        boxes = box_factory(size)
        result = stage3_layout.run(text, metrics, size, boxes)
        attempts.append(size)
        logger.debug(
            "  %.1fpt: %d line(s)%s", size, len(result.lines), " (overflow)" if result.overflow else ""
        )
        if not result.overflow or size - _SIZE_STEP < typo.min_body_size_pt:
            break
        size -= _SIZE_STEP

    lines = result.lines
    truncated = False
    if result.overflow and lines:
        last = lines[-1]
        lines = lines[:-1] + [truncate_line(last, metrics, size, boxes[last.box_index].width)]
        truncated = True
        logger.warning(
            "Story does not fit at %.1fpt — truncated after %d line(s)", size, len(lines)
        )

    fitted = FittedLayout(
        font_size=size,
        lines=lines,
        overflow=result.overflow,
        truncated=truncated,
        attempts=attempts,
    )
    logger.info(
        "Stage 4 complete: %.1fpt after %d attempt(s), %d line(s)",
        size, len(attempts), len(lines),
    )
    return fitted


def truncate_line(
    line: LayoutLine,
    metrics: FontMetrics,
    font_size: float,
    max_width: float,
) -> LayoutLine:
    """Return a copy of ``line`` ending in a single ellipsis.

    Trailing periods are dropped first so the line never ends in "....".
    Whole words (then characters) are removed until the marked line fits.
    """
    text = line.text.rstrip(".")
    while text and metrics.width(text + ELLIPSIS, font_size) > max_width:
        if " " in text:
            text = text.rsplit(" ", 1)[0]
        else:
            text = text[:-1]
        text = text.rstrip(". ")
    return line.model_copy(update={"text": text + ELLIPSIS})
