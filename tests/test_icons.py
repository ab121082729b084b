from __future__ import annotations

import math

import pytest

from formfill.coords.precision import Box
from formfill.model.field import IconVariant
from formfill.pdf.fonts import Color
from formfill.pdf.icons import SHAPES, Circle, Line, Polygon, Rect, check, draw_icon, icon_shape

BLACK = Color(0.0, 0.0, 0.0)


def _numbers(shape) -> list[float]:
    values: list[float] = []
    for primitive in shape:
        if isinstance(primitive, Line):
            values += [*primitive.start, *primitive.end, primitive.thickness]
        elif isinstance(primitive, Circle):
            values += [*primitive.center, primitive.radius, primitive.thickness]
        elif isinstance(primitive, Rect):
            values += [primitive.x, primitive.y, primitive.width, primitive.height, primitive.thickness]
        else:
            for point in primitive.points:
                values += list(point)
            values.append(primitive.thickness)
    return values


@pytest.mark.parametrize("variant", list(SHAPES))
def test_shapes_scale_linearly_with_the_box(variant):
    small = SHAPES[variant](Box(-15.0, -15.0, 30.0, 30.0))
    large = SHAPES[variant](Box(-30.0, -30.0, 60.0, 60.0))
    assert [type(item) for item in small] == [type(item) for item in large]
    assert _numbers(large) == pytest.approx([value * 2 for value in _numbers(small)], abs=1e-9)


@pytest.mark.parametrize("variant", list(SHAPES))
def test_shapes_follow_the_box_center(variant):
    at_origin = SHAPES[variant](Box(-15.0, -15.0, 30.0, 30.0))
    moved = SHAPES[variant](Box(85.0, 185.0, 30.0, 30.0))
    shifted = []
    for primitive in at_origin:
        if isinstance(primitive, Line):
            shifted.append(((primitive.start[0] + 100, primitive.start[1] + 200), (primitive.end[0] + 100, primitive.end[1] + 200)))
        elif isinstance(primitive, Circle):
            shifted.append((primitive.center[0] + 100, primitive.center[1] + 200))
        elif isinstance(primitive, Rect):
            shifted.append((primitive.x + 100, primitive.y + 200))
        else:
            shifted.append(tuple((x + 100, y + 200) for x, y in primitive.points))
    actual = []
    for primitive in moved:
        if isinstance(primitive, Line):
            actual.append((primitive.start, primitive.end))
        elif isinstance(primitive, Circle):
            actual.append(primitive.center)
        elif isinstance(primitive, Rect):
            actual.append((primitive.x, primitive.y))
        else:
            actual.append(primitive.points)
    assert _flatten(actual) == pytest.approx(_flatten(shifted), abs=1e-9)


def _flatten(items) -> list[float]:
    if isinstance(items, (int, float)):
        return [float(items)]
    flat: list[float] = []
    for item in items:
        flat += _flatten(item)
    return flat


def test_icons_use_the_smaller_box_side():
    wide = Box(0.0, 0.0, 90.0, 30.0)
    (ring,) = SHAPES[IconVariant.CIRCLE](wide)
    assert ring.center == (45.0, 15.0)
    assert ring.radius == pytest.approx(12.0)


def test_check_geometry():
    first, second = check(Box(0.0, 0.0, 30.0, 30.0))
    assert first.start == pytest.approx((4.5, 10.5))
    assert first.end == pytest.approx((11.85, 6.0))
    assert second.end == pytest.approx((25.5, 25.5))
    assert first.thickness == pytest.approx(3.6)


def test_star_has_ten_vertices_with_top_point_up():
    (outline,) = SHAPES[IconVariant.STAR](Box(0.0, 0.0, 40.0, 40.0))
    assert isinstance(outline, Polygon)
    assert len(outline.points) == 10
    assert outline.points[0] == pytest.approx((20.0, 38.0))
    assert not outline.filled
    (filled,) = SHAPES[IconVariant.STAR_FILLED](Box(0.0, 0.0, 40.0, 40.0))
    assert filled.filled


def test_arrow_points_along_its_direction():
    shaft = SHAPES[IconVariant.ARROW_UP](Box(0.0, 0.0, 20.0, 20.0))[0]
    assert shaft.start == pytest.approx((10.0, 3.0))
    assert shaft.end == pytest.approx((10.0, 17.0))
    right = SHAPES[IconVariant.ARROW_RIGHT](Box(0.0, 0.0, 20.0, 20.0))[0]
    assert math.isclose(right.end[0], 17.0)


@pytest.mark.parametrize("variant", ["THUMBS_UP", "PIN", "WARNING", "not-an-icon", None])
def test_variants_without_geometry_draw_a_check(variant):
    assert icon_shape(variant) is check


def test_variant_lookup_is_case_insensitive():
    assert icon_shape("star") is SHAPES[IconVariant.STAR]


def test_draw_icon_dispatches_every_primitive(recording_surface):
    shape = draw_icon(recording_surface, IconVariant.CIRCLE_CHECK, Box(0.0, 0.0, 30.0, 30.0), BLACK)
    assert [kind for kind, _ in recording_surface.calls] == ["circle", "line", "line"]
    assert [item for _, item in recording_surface.calls] == list(shape)


def test_filled_heart_uses_a_filled_polygon(recording_surface):
    draw_icon(recording_surface, IconVariant.HEART_FILLED, Box(0.0, 0.0, 30.0, 30.0), BLACK)
    kinds = [kind for kind, _ in recording_surface.calls]
    assert kinds == ["polygon", "circle", "circle"]
    assert all(item.filled for _, item in recording_surface.calls)
