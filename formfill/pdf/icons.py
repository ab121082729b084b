"""Icon shapes as pure geometry over a bounding box.

Every measurement is a fixed proportion of ``min(width, height)`` of the box
and every shape is centered on the box center, so icons scale with their
field and need no size of their own. Boxes and points use PDF orientation
(Y grows upward); on-screen surfaces flip around the box when painting.

Shape functions return primitives instead of drawing, which lets the same
geometry be painted onto the PDF overlay and onto the editor canvas.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Protocol, Union

from formfill.coords.precision import Box, normalize
from formfill.model.field import IconVariant
from formfill.pdf.fonts import Color

Point = tuple[float, float]


@dataclass(slots=True, frozen=True)
class Line:
    start: Point
    end: Point
    thickness: float


@dataclass(slots=True, frozen=True)
class Circle:
    center: Point
    radius: float
    thickness: float
    filled: bool = False


@dataclass(slots=True, frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    thickness: float
    filled: bool = False


@dataclass(slots=True, frozen=True)
class Polygon:
    points: tuple[Point, ...]
    thickness: float
    filled: bool = False


Primitive = Union[Line, Circle, Rect, Polygon]
Shape = tuple[Primitive, ...]
ShapeFunction = Callable[[Box], Shape]


class IconSurface(Protocol):
    def draw_line(self, line: Line, color: Color) -> None: ...

    def draw_circle(self, circle: Circle, color: Color) -> None: ...

    def draw_rect(self, rect: Rect, color: Color) -> None: ...

    def draw_polygon(self, polygon: Polygon, color: Color) -> None: ...


def _point(x: float, y: float) -> Point:
    return normalize(x), normalize(y)


def _thickness(size: float, ratio: float) -> float:
    return max(1.0, normalize(size * ratio))


def _inset(box: Box, factor: float) -> Box:
    cx, cy = box.center
    width = box.width * factor
    height = box.height * factor
    return Box(cx - width / 2.0, cy - height / 2.0, width, height)


def check(box: Box) -> Shape:
    size = box.size
    cx, cy = box.center
    arm = size * 0.35
    lift = size * 0.15
    thickness = _thickness(size, 0.12)
    left = _point(cx - arm, cy - lift)
    junction = _point(cx - arm * 0.3, cy - lift - size * 0.15)
    right = _point(cx + arm, cy + lift + size * 0.2)
    return (Line(left, junction, thickness), Line(junction, right, thickness))


def cross(box: Box) -> Shape:
    size = box.size
    cx, cy = box.center
    radius = size * 0.4
    thickness = _thickness(size, 0.12)
    return (
        Line(_point(cx - radius, cy - radius), _point(cx + radius, cy + radius), thickness),
        Line(_point(cx - radius, cy + radius), _point(cx + radius, cy - radius), thickness),
    )


def circle(box: Box, filled: bool = False) -> Shape:
    size = box.size
    cx, cy = box.center
    return (Circle(_point(cx, cy), normalize(size * 0.4), _thickness(size, 0.1), filled),)


def square(box: Box, filled: bool = False) -> Shape:
    size = box.size
    cx, cy = box.center
    return (
        Rect(
            normalize(cx - size / 2.0),
            normalize(cy - size / 2.0),
            normalize(size),
            normalize(size),
            _thickness(size, 0.1),
            filled,
        ),
    )


def star(box: Box, filled: bool = False) -> Shape:
    size = box.size
    cx, cy = box.center
    outer = size * 0.45
    inner = outer * 0.4
    points = []
    for index in range(10):
        angle = math.pi / 2.0 + index * math.pi / 5.0
        radius = outer if index % 2 == 0 else inner
        points.append(_point(cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return (Polygon(tuple(points), _thickness(size, 0.08), filled),)


def heart(box: Box, filled: bool = False) -> Shape:
    size = box.size
    cx, cy = box.center
    thickness = _thickness(size, 0.1)
    lobe_radius = normalize(size * 0.2)
    shoulder_y = cy + size * 0.1
    tip = _point(cx, cy - size * 0.4)
    left = _point(cx - size * 0.4, shoulder_y)
    right = _point(cx + size * 0.4, shoulder_y)
    lobes = (
        Circle(_point(cx - size * 0.2, shoulder_y), lobe_radius, thickness, filled),
        Circle(_point(cx + size * 0.2, shoulder_y), lobe_radius, thickness, filled),
    )
    if filled:
        return (Polygon((left, right, tip), thickness, True),) + lobes
    return (Line(tip, left, thickness), Line(tip, right, thickness)) + lobes


def arrow(box: Box, angle: float) -> Shape:
    """Arrow pointing along ``angle`` (radians, 0 = right, counter-clockwise)."""
    size = box.size
    cx, cy = box.center
    half = size * 0.35
    head = size * 0.25
    thickness = _thickness(size, 0.1)
    dx, dy = math.cos(angle), math.sin(angle)
    start = _point(cx - dx * half, cy - dy * half)
    end_x, end_y = cx + dx * half, cy + dy * half
    end = _point(end_x, end_y)
    barbs = tuple(
        Line(end, _point(end_x + head * math.cos(angle + turn), end_y + head * math.sin(angle + turn)), thickness)
        for turn in (3 * math.pi / 4, -3 * math.pi / 4)
    )
    return (Line(start, end, thickness),) + barbs


def plus(box: Box) -> Shape:
    size = box.size
    cx, cy = box.center
    radius = size * 0.4
    thickness = _thickness(size, 0.12)
    return (
        Line(_point(cx - radius, cy), _point(cx + radius, cy), thickness),
        Line(_point(cx, cy - radius), _point(cx, cy + radius), thickness),
    )


def minus(box: Box) -> Shape:
    return plus(box)[:1]


SHAPES: dict[IconVariant, ShapeFunction] = {
    IconVariant.CHECK: check,
    IconVariant.CROSS: cross,
    IconVariant.CIRCLE: circle,
    IconVariant.CIRCLE_FILLED: lambda box: circle(box, filled=True),
    IconVariant.CIRCLE_CHECK: lambda box: circle(box) + check(_inset(box, 0.7)),
    IconVariant.CIRCLE_CROSS: lambda box: circle(box) + cross(_inset(box, 0.6)),
    IconVariant.SQUARE: square,
    IconVariant.SQUARE_FILLED: lambda box: square(box, filled=True),
    IconVariant.SQUARE_CHECK: lambda box: square(box) + check(_inset(box, 0.7)),
    IconVariant.STAR: star,
    IconVariant.STAR_FILLED: lambda box: star(box, filled=True),
    IconVariant.HEART: heart,
    IconVariant.HEART_FILLED: lambda box: heart(box, filled=True),
    IconVariant.ARROW_RIGHT: lambda box: arrow(box, 0.0),
    IconVariant.ARROW_UP: lambda box: arrow(box, math.pi / 2),
    IconVariant.ARROW_LEFT: lambda box: arrow(box, math.pi),
    IconVariant.ARROW_DOWN: lambda box: arrow(box, -math.pi / 2),
    IconVariant.PLUS: plus,
    IconVariant.MINUS: minus,
}


def icon_shape(variant: IconVariant | str | None) -> ShapeFunction:
    """Shape function for ``variant``; anything without its own geometry draws a check."""
    try:
        key = IconVariant(str(getattr(variant, "value", variant)).upper())
    except ValueError:
        return check
    return SHAPES.get(key, check)


def draw_icon(surface: IconSurface, variant: IconVariant | str | None, box: Box, color: Color) -> Shape:
    shape = icon_shape(variant)(box)
    for primitive in shape:
        if isinstance(primitive, Line):
            surface.draw_line(primitive, color)
        elif isinstance(primitive, Circle):
            surface.draw_circle(primitive, color)
        elif isinstance(primitive, Rect):
            surface.draw_rect(primitive, color)
        else:
            surface.draw_polygon(primitive, color)
    return shape
