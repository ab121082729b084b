from __future__ import annotations

import pytest

from formfill.coords.precision import (
    Box,
    canvas_to_pdf_y,
    coordinates_match,
    format_coordinate,
    normalize,
    normalize_box,
    store_drag_coordinate,
    text_baseline,
    transform,
)


def test_normalize_strips_float_noise():
    assert normalize(0.1 + 0.2) == 0.3
    assert normalize(1.0000000000000002) == 1.0


@pytest.mark.parametrize("value", [0.0, 123.456789, -42.125, 1e-9, 791.9999999999, 1e300, -1e300])
def test_normalize_is_idempotent(value):
    assert normalize(normalize(value)) == normalize(value)


def test_normalize_passes_through_values_too_large_to_scale():
    assert normalize(1e300) == 1e300
    assert normalize(-1e300) == -1e300
    assert normalize(float("inf")) == float("inf")


def test_normalize_box():
    box = normalize_box(0.1 + 0.2, 1.0, 2.0, 3.0)
    assert box == Box(0.3, 1.0, 2.0, 3.0)
    assert box.size == 2.0
    assert box.center == pytest.approx((1.3, 2.5))


def test_transform_applies_scale_then_offset():
    assert transform(100.0, 1.5) == 150.0
    assert transform(100.0, 2.0, offset=-3.0) == 197.0


def test_text_baseline_sits_a_fifth_of_the_font_above_the_box_bottom():
    assert text_baseline(100.0, 35.0, 14.0) == pytest.approx(132.2)


def test_flip_round_trip():
    page_height = 792.0
    for canvas_y, height in [(0.0, 30.0), (100.25, 35.0), (762.0, 30.0)]:
        pdf_y = canvas_to_pdf_y(canvas_y, height, page_height)
        assert canvas_to_pdf_y(pdf_y, height, page_height) == pytest.approx(canvas_y)


def test_flip_of_top_box_lands_at_page_top():
    assert canvas_to_pdf_y(0.0, 30.0, 792.0) == 762.0


def test_store_drag_coordinate_undoes_zoom_and_origin():
    assert store_drag_coordinate(260.0, 410.0, 10.0, 10.0, 2.0) == (125.0, 200.0)


def test_coordinates_match_tolerance():
    assert coordinates_match(10.0, 10.009)
    assert not coordinates_match(10.0, 10.02)


def test_format_coordinate_is_fixed_width():
    assert format_coordinate(1.5) == "1.500000000000000"
