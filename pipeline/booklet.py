"""Run the booklet pipeline for one request: Stage 1 through Stage 6.

The only collaborator is the injected ``httpx.Client`` used to download
illustrations; everything else is pure and rebuilt per call.
"""
import logging

import httpx

from models.booklet import BookletRequest
from models.design import DesignSystem
from pipeline import (
    stage1_normalize,
    stage2_boxes,
    stage4_fit,
    stage5_images,
    stage6_render,
)
from settings import Settings
from utils.fonts import metrics_for

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
PDF_FILENAME = "story-booklet.pdf"


def build_booklet(
    request: BookletRequest,
    settings: Settings,
    design: DesignSystem,
    client: httpx.Client,
) -> bytes:
    """Return the PDF bytes of the booklet.

    Raises ValidationError for unusable input and UpstreamImageError when an
    illustration cannot be loaded. Text that does not fit is truncated, not
    reported as an error.
    """
    story = stage1_normalize.run(request, settings)

    title_metrics = metrics_for(design.typography.title.font)
    body_metrics = metrics_for(design.typography.body.font)

    title_size = stage2_boxes.title_font_size(story.title, title_metrics, design)
    title_block = stage2_boxes.title_block_height(design, title_size)
    image_pages = [bool(ref and ref.strip()) for ref in request.images]

    # A failing illustration aborts the request before any layout work
    placements = stage5_images.run(
        request.images, title_block, design, client, settings.image_fetch_timeout
    )

    fitted = stage4_fit.run(
        story.text,
        body_metrics,
        lambda _size: stage2_boxes.build_boxes(title_block, image_pages, design),
        design,
    )

    stamp = stage6_render.load_stamp(settings.stamp_logo_path)
    return stage6_render.run(story, fitted, placements, design, title_size, stamp)
