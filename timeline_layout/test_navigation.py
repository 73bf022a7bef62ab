from __future__ import annotations

from datetime import date, datetime

import pytest

from .geometry import GeometryMapper
from .models import Span
from .navigation import scroll_offset_for_now

SPAN_2024 = Span(years=[2024], start_month=0)


def test_centres_now_in_the_viewport():
    offset = scroll_offset_for_now(SPAN_2024, 10, 1000, 0, now=date(2024, 7, 1))

    # 182 days into the year, minus half the viewport
    assert offset == pytest.approx(1820 - 500)


def test_rail_shrinks_the_usable_viewport():
    offset = scroll_offset_for_now(SPAN_2024, 10, 1000, 200, now=datetime(2024, 7, 1, 15, 30))

    assert offset == pytest.approx(1820 - 400)


def test_offset_is_clamped_at_both_ends():
    assert scroll_offset_for_now(SPAN_2024, 10, 1000, 0, now=date(2024, 1, 2)) == 0
    # content is 366 * 10 wide, so the furthest scroll is 3660 - 1000
    assert scroll_offset_for_now(SPAN_2024, 10, 1000, 0, now=date(2024, 12, 31)) == pytest.approx(2660)


def test_viewport_wider_than_content_never_scrolls():
    assert scroll_offset_for_now(SPAN_2024, 1, 5000, 0, now=date(2024, 12, 1)) == 0


def test_now_outside_rendered_years_is_a_no_op():
    assert scroll_offset_for_now(SPAN_2024, 10, 1000, 0, now=date(2025, 1, 5)) is None
    assert scroll_offset_for_now(SPAN_2024, 10, 1000, 0, now=date(2023, 12, 31)) is None


def test_defaults_to_the_current_instant():
    current_year = datetime.now().year
    span = Span(years=[current_year - 1, current_year, current_year + 1], start_month=0)

    offset = scroll_offset_for_now(span, 8, 800, 0)

    assert offset is not None
    assert offset > 0


def test_clamp_matches_rendered_width_for_fractional_scales():
    mapper = GeometryMapper(SPAN_2024, 0.3, [], cell_height=40, group_gap=16, rail_width=0)

    offset = scroll_offset_for_now(SPAN_2024, 0.3, 50, 0, now=date(2024, 12, 31))

    # 366 * 0.3 = 109.8 px is drawn as 110
    assert mapper.total_width() == 110
    assert offset == pytest.approx(mapper.total_width() - 50)
