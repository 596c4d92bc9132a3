"""Tests for Stage 2 page/box model."""
import pytest

from models.design import DesignSystem, ImageBox, PageGeometry
from pipeline.stage2_boxes import (
    build_boxes,
    image_reservation,
    page_start_y,
    title_block_height,
    title_font_size,
)

TITLE_BLOCK = 22 + 10 + 11 + 12  # default title + gap + subtitle + gap
PAGE_TOP = 841.89 - 40
FULL_WIDTH = 595.28 - 80
NARROW_WIDTH = FULL_WIDTH - 220 - 14


# ---------------------------------------------------------------------------
# Title block
# ---------------------------------------------------------------------------

class TestTitleBlock:
    def test_default_height(self, design):
        assert title_block_height(design) == TITLE_BLOCK

    def test_height_with_shrunk_title(self, design):
        assert title_block_height(design, 18) == TITLE_BLOCK - 4

    def test_short_title_keeps_full_size(self, design, metrics):
        assert title_font_size("LUNA", metrics, design) == 22

    def test_long_title_shrinks_to_fit(self, design, metrics):
        title = "EL DRAGÓN QUE QUERÍA APRENDER A VOLAR SIN ALAS"
        size = title_font_size(title, metrics, design)
        assert size < 22
        assert metrics.width(title, size) <= design.page.content_width_pt

    def test_title_never_below_subtitle_size(self, design, metrics):
        assert title_font_size("W" * 200, metrics, design) == design.typography.subtitle.size_pt


class TestPageStart:
    def test_first_page_below_title_block(self, design):
        assert page_start_y(0, TITLE_BLOCK, design) == pytest.approx(PAGE_TOP - TITLE_BLOCK)

    @pytest.mark.parametrize("page_index", [1, 2])
    def test_later_pages_at_top_margin(self, design, page_index):
        assert page_start_y(page_index, TITLE_BLOCK, design) == pytest.approx(PAGE_TOP)


# ---------------------------------------------------------------------------
# build_boxes
# ---------------------------------------------------------------------------

class TestBuildBoxesWithoutImages:
    def test_one_full_width_box_per_page(self, design):
        boxes = build_boxes(TITLE_BLOCK, [False, False, False], design)
        assert [b.page_index for b in boxes] == [0, 1, 2]
        assert all(b.width == pytest.approx(FULL_WIDTH) for b in boxes)
        assert all(b.x == 40 for b in boxes)

    def test_boxes_reach_bottom_margin(self, design):
        boxes = build_boxes(TITLE_BLOCK, [], design)
        assert all(b.y_bottom == pytest.approx(40) for b in boxes)

    def test_first_page_is_shorter_by_title_block(self, design):
        boxes = build_boxes(TITLE_BLOCK, [], design)
        assert boxes[0].height == pytest.approx(boxes[1].height - TITLE_BLOCK)

    def test_missing_flags_mean_no_image(self, design):
        assert len(build_boxes(TITLE_BLOCK, [], design)) == 3


class TestBuildBoxesWithImages:
    def test_image_page_gets_narrow_then_full_box(self, design):
        boxes = build_boxes(TITLE_BLOCK, [True, False, False], design)
        assert [b.page_index for b in boxes] == [0, 0, 1, 2]
        narrow, below = boxes[0], boxes[1]
        assert narrow.width == pytest.approx(NARROW_WIDTH)
        assert narrow.height == 260
        assert narrow.y_top == pytest.approx(PAGE_TOP - TITLE_BLOCK)
        assert below.width == pytest.approx(FULL_WIDTH)
        assert below.y_top == pytest.approx(narrow.y_bottom)
        assert below.y_bottom == pytest.approx(40)

    def test_all_pages_with_images(self, design):
        boxes = build_boxes(TITLE_BLOCK, [True, True, True], design)
        assert len(boxes) == 6
        assert [b.width for b in boxes[::2]] == [pytest.approx(NARROW_WIDTH)] * 3

    def test_order_is_page_ascending_top_down(self, design):
        boxes = build_boxes(TITLE_BLOCK, [True, True, False], design)
        keys = [(b.page_index, -b.y_top) for b in boxes]
        assert keys == sorted(keys)

    def test_no_remainder_box_when_image_band_fills_page(self):
        design = DesignSystem(
            page=PageGeometry(height_pt=400, margin_pt=40),
            image_box=ImageBox(height_pt=400),
        )
        boxes = build_boxes(0, [False, True, False], design)
        assert [b.page_index for b in boxes] == [0, 1, 2]
        assert boxes[1].width == pytest.approx(design.page.content_width_pt - 220 - 14)

    def test_narrow_box_omitted_when_image_box_too_wide(self):
        design = DesignSystem(image_box=ImageBox(width_pt=520))
        boxes = build_boxes(TITLE_BLOCK, [True, False, False], design)
        assert [b.page_index for b in boxes] == [0, 1, 2]
        assert boxes[0].y_top == pytest.approx(PAGE_TOP - TITLE_BLOCK - 260)

    def test_page_count_from_design(self):
        design = DesignSystem(page=PageGeometry(page_count=5))
        assert len(build_boxes(TITLE_BLOCK, [], design)) == 5


# ---------------------------------------------------------------------------
# image_reservation
# ---------------------------------------------------------------------------

class TestImageReservation:
    def test_right_aligned_in_content_area(self, design):
        box = image_reservation(1, TITLE_BLOCK, design)
        assert box.x + box.width == pytest.approx(595.28 - 40)
        assert (box.width, box.height) == (220, 260)
        assert box.y_top == pytest.approx(PAGE_TOP)

    def test_first_page_below_title(self, design):
        box = image_reservation(0, TITLE_BLOCK, design)
        assert box.y_top == pytest.approx(PAGE_TOP - TITLE_BLOCK)

    def test_does_not_overlap_narrow_text_box(self, design):
        narrow = build_boxes(TITLE_BLOCK, [True], design)[0]
        reserved = image_reservation(0, TITLE_BLOCK, design)
        assert narrow.x + narrow.width + 14 == pytest.approx(reserved.x)
