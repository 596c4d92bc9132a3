"""Stage 6: PDF rendering — execute the layout decisions on a reportlab canvas.

Draw order per page:
  1. (page 1) title, centered, then the subtitle
  2. body lines assigned to the page
  3. illustration shadow, then the illustration
  4. (page 1) optional stamp logo on top

No layout decisions are taken here. Exactly ``design.page.page_count``
pages are emitted, even when the later ones stay empty.
"""
import io
import logging
from pathlib import Path

from PIL import Image
from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from models.booklet import FittedLayout, ImagePlacement, LayoutLine, NormalizedStory
from models.design import DesignSystem
from utils.fonts import resolve_font

logger = logging.getLogger(__name__)


def run(
    story: NormalizedStory,
    fitted: FittedLayout,
    placements: list[ImagePlacement],
    design: DesignSystem,
    title_size: float,
    stamp: Image.Image | None = None,
) -> bytes:
    """Render all pages and return the serialized PDF."""
    page = design.page
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(page.width_pt, page.height_pt))
    c.setTitle(story.title)
    c.setSubject(story.subtitle)

    lines_by_page: dict[int, list[LayoutLine]] = {}
    for line in fitted.lines:
        lines_by_page.setdefault(line.page_index, []).append(line)
    placements_by_page = {p.page_index: p for p in placements}

    for page_index in range(page.page_count):
        if page_index == 0:
            draw_imprint(c, story, design, title_size)
        draw_lines(c, lines_by_page.get(page_index, []), fitted.font_size, design)
        placement = placements_by_page.get(page_index)
        if placement is not None:
            draw_illustration(c, placement, design)
        if page_index == 0 and stamp is not None:
            draw_stamp(c, stamp, design)
        c.showPage()

    c.save()
    pdf_bytes = buffer.getvalue()
    logger.info(
        "Stage 6 complete: %d page(s), %d line(s), %d image(s), %d bytes",
        page.page_count, len(fitted.lines), len(placements), len(pdf_bytes),
    )
    return pdf_bytes


def draw_imprint(
    c: canvas.Canvas,
    story: NormalizedStory,
    design: DesignSystem,
    title_size: float,
) -> None:
    page = design.page
    typo = design.typography
    title_font = resolve_font(typo.title.font)
    subtitle_font = resolve_font(typo.subtitle.font)
    top_y = page.height_pt - page.margin_pt

    title_width = c.stringWidth(story.title, title_font, title_size)
    c.setFont(title_font, title_size)
    c.setFillColor(HexColor(typo.title.color))
    c.drawString(page.margin_pt + (page.content_width_pt - title_width) / 2, top_y, story.title)

    c.setFont(subtitle_font, typo.subtitle.size_pt)
    c.setFillColor(HexColor(typo.subtitle.color))
    c.drawString(page.margin_pt, top_y - title_size - typo.title_gap_pt, story.subtitle)


def draw_lines(
    c: canvas.Canvas,
    lines: list[LayoutLine],
    font_size: float,
    design: DesignSystem,
) -> None:
    if not lines:
        return
    body = design.typography.body
    c.setFont(resolve_font(body.font), font_size)
    c.setFillColor(HexColor(body.color))
    for line in lines:
        c.drawString(line.x, line.y, line.text)


def draw_illustration(c: canvas.Canvas, placement: ImagePlacement, design: DesignSystem) -> None:
    box = design.image_box
    c.saveState()
    c.setFillColorRGB(0, 0, 0)
    c.setFillAlpha(box.shadow_opacity)
    c.rect(
        placement.x + box.shadow_offset_pt,
        placement.y - box.shadow_offset_pt,
        placement.width,
        placement.height,
        stroke=0,
        fill=1,
    )
    c.restoreState()
    c.drawImage(
        ImageReader(placement.source.image),
        placement.x,
        placement.y,
        width=placement.width,
        height=placement.height,
        mask="auto",
    )


def draw_stamp(c: canvas.Canvas, stamp: Image.Image, design: DesignSystem) -> None:
    """Draw the product stamp, rotated, overlapping the top-left margin."""
    page = design.page
    style = design.stamp
    scale = style.size_pt / max(stamp.size)
    width = stamp.size[0] * scale
    height = stamp.size[1] * scale
    c.saveState()
    c.translate(
        page.margin_pt + style.offset_x_pt,
        page.height_pt - page.margin_pt - height + style.offset_y_pt,
    )
    c.rotate(style.rotation_deg)
    c.drawImage(ImageReader(stamp), 0, 0, width=width, height=height, mask="auto")
    c.restoreState()


def load_stamp(path: Path | None) -> Image.Image | None:
    """Open the stamp logo; a missing or unreadable file means no stamp."""
    if path is None:
        return None
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except OSError as exc:
        logger.warning("Stamp logo %s could not be read: %s", path, exc)
        return None
