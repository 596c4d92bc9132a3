"""Stage 2: Page/box model — where text and illustrations may go.

Every page contributes its text boxes in reading order:

  - page with an illustration:  a narrow box beside the image reservation
                                box, then a full-width box below it
  - page without:               one full-width box down to the bottom margin

Page 1 starts below the title block; later pages start at the top margin.
Boxes are rebuilt for every layout attempt and never mutated.
"""
import logging

from models.booklet import LayoutBox
from models.design import DesignSystem
from utils.fonts import FontMetrics

logger = logging.getLogger(__name__)


def title_font_size(title: str, metrics: FontMetrics, design: DesignSystem) -> float:
    """Largest title size (1pt steps) that fits the text width.

    Never goes below the subtitle size; a title that still does not fit is
    drawn at that size anyway.
    """
    typo = design.typography
    size = typo.title.size_pt
    floor = typo.subtitle.size_pt
    while size > floor and metrics.width(title, size) > design.page.content_width_pt:
        size -= 1
    return size


def title_block_height(design: DesignSystem, title_size: float | None = None) -> float:
    typo = design.typography
    if title_size is None:
        title_size = typo.title.size_pt
    return title_size + typo.title_gap_pt + typo.subtitle.size_pt + typo.subtitle_gap_pt


def page_start_y(page_index: int, title_block: float, design: DesignSystem) -> float:
    """Top of the usable area of a page (first baseline of its first box)."""
    top = design.page.height_pt - design.page.margin_pt
    return top - title_block if page_index == 0 else top


def build_boxes(
    title_block: float,
    image_pages: list[bool],
    design: DesignSystem,
) -> list[LayoutBox]:
    """Return the ordered text boxes of all pages.

    ``image_pages[i]`` says whether page i carries an illustration; missing
    entries count as False. Boxes with no usable area are omitted.
    """
    page = design.page
    image_box = design.image_box
    full_width = page.content_width_pt
    narrow_width = full_width - image_box.width_pt - image_box.gutter_pt

    boxes: list[LayoutBox] = []
    for page_index in range(page.page_count):
        start_y = page_start_y(page_index, title_block, design)
        has_image = page_index < len(image_pages) and image_pages[page_index]

        if has_image:
            _append_box(boxes, page_index, page.margin_pt, start_y, narrow_width, image_box.height_pt)
            start_y -= image_box.height_pt

        _append_box(boxes, page_index, page.margin_pt, start_y, full_width, start_y - page.margin_pt)

    logger.debug("Built %d text box(es) for %d page(s)", len(boxes), page.page_count)
    return boxes


def image_reservation(page_index: int, title_block: float, design: DesignSystem) -> LayoutBox:
    """The box an illustration on ``page_index`` is fitted into (right-aligned)."""
    page = design.page
    image_box = design.image_box
    return LayoutBox(
        page_index=page_index,
        x=page.width_pt - page.margin_pt - image_box.width_pt,
        y_top=page_start_y(page_index, title_block, design),
        width=image_box.width_pt,
        height=image_box.height_pt,
    )


def _append_box(
    boxes: list[LayoutBox],
    page_index: int,
    x: float,
    y_top: float,
    width: float,
    height: float,
) -> None:
    if width <= 0 or height <= 0:
        return
    boxes.append(LayoutBox(page_index=page_index, x=x, y_top=y_top, width=width, height=height))
