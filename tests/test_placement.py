"""Unit tests for placement policies and rectangle math."""

from __future__ import annotations

import pytest

from signpdf.placement import (
    DEFAULT_PAGE_SIZE,
    PlacementPolicy,
    StampRect,
    append_page_rect,
    centered_rect,
    compute_rect,
    fixed_offset_rect,
    scaled_dimensions,
)

from .conftest import A4_HEIGHT, A4_WIDTH, LETTER_HEIGHT, LETTER_WIDTH


class TestScaledDimensions:
    def test_half_scale(self):
        assert scaled_dimensions(200, 80, 0.5) == (100.0, 40.0)

    def test_default_is_half(self):
        assert scaled_dimensions(300, 120) == (150.0, 60.0)

    def test_odd_pixels(self):
        assert scaled_dimensions(201, 81) == pytest.approx((100.5, 40.5))

    @pytest.mark.parametrize("scale", [0, -0.5])
    def test_non_positive_scale_rejected(self, scale):
        with pytest.raises(ValueError, match="positive"):
            scaled_dimensions(200, 80, scale)


class TestAppendPageRect:
    def test_letter_example(self):
        rect = append_page_rect(LETTER_WIDTH, LETTER_HEIGHT, 100, 40)
        assert rect == StampRect(x=331.0, y=356.0, width=100, height=40)

    def test_default_page_size_is_letter(self):
        assert DEFAULT_PAGE_SIZE == (612.0, 792.0)


class TestFixedOffsetRect:
    def test_offset_from_stamp_size(self):
        assert fixed_offset_rect(100, 40) == StampRect(100, 50, 100, 40)


class TestCenteredRect:
    def test_centered_on_letter(self):
        rect = centered_rect(LETTER_WIDTH, LETTER_HEIGHT, 100, 40)
        assert rect.x + rect.width / 2 == pytest.approx(LETTER_WIDTH / 2)
        assert rect.y + rect.height / 2 == pytest.approx(LETTER_HEIGHT / 2)


class TestComputeRect:
    def test_stamp_all_pages_ignores_page_size(self):
        letter = compute_rect(
            PlacementPolicy.STAMP_ALL_PAGES, LETTER_WIDTH, LETTER_HEIGHT, 100, 40
        )
        a4 = compute_rect(
            PlacementPolicy.STAMP_ALL_PAGES, A4_WIDTH, A4_HEIGHT, 100, 40
        )
        assert letter == a4 == StampRect(100, 50, 100, 40)

    def test_center_all_pages_follows_page_size(self):
        letter = compute_rect(
            PlacementPolicy.CENTER_ALL_PAGES, LETTER_WIDTH, LETTER_HEIGHT, 100, 40
        )
        a4 = compute_rect(
            PlacementPolicy.CENTER_ALL_PAGES, A4_WIDTH, A4_HEIGHT, 100, 40
        )
        assert letter != a4

    def test_append_blank_page(self):
        rect = compute_rect(
            PlacementPolicy.APPEND_BLANK_PAGE, LETTER_WIDTH, LETTER_HEIGHT, 100, 40
        )
        assert (rect.x, rect.y) == (331.0, 356.0)


class TestPlacementPolicyParse:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("append-blank-page", PlacementPolicy.APPEND_BLANK_PAGE),
            ("STAMP_ALL_PAGES", PlacementPolicy.STAMP_ALL_PAGES),
            (" center-all-pages ", PlacementPolicy.CENTER_ALL_PAGES),
        ],
    )
    def test_known_values(self, value, expected):
        assert PlacementPolicy.parse(value) is expected

    def test_unknown_value(self):
        with pytest.raises(ValueError, match="Unknown placement policy"):
            PlacementPolicy.parse("bottom-right")

    def test_only_append_adds_page(self):
        assert PlacementPolicy.APPEND_BLANK_PAGE.appends_page
        assert not PlacementPolicy.STAMP_ALL_PAGES.appends_page
        assert not PlacementPolicy.CENTER_ALL_PAGES.appends_page
