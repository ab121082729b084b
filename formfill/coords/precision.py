"""Precision coordinate helpers shared by the editor, preview, and PDF fill."""

from __future__ import annotations

from dataclasses import dataclass
import math

PRECISION_DECIMALS = 15
PRECISION_FACTOR = 10**PRECISION_DECIMALS
MATCH_TOLERANCE = 0.01
BASELINE_FACTOR = 0.2


@dataclass(slots=True, frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def size(self) -> float:
        return min(self.width, self.height)

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0


def normalize(value: float) -> float:
    """Round ``value`` to 15 decimal places to strip floating point noise."""
    scaled = value * PRECISION_FACTOR
    if not math.isfinite(scaled):
        return value
    return round(scaled) / PRECISION_FACTOR


def normalize_box(x: float, y: float, width: float, height: float) -> Box:
    return Box(normalize(x), normalize(y), normalize(width), normalize(height))


def transform(value: float, scale: float, offset: float = 0.0) -> float:
    return normalize(value * scale + offset)


def text_baseline(field_y: float, field_height: float, font_size: float) -> float:
    """Baseline for text anchored inside a box in top-down coordinates."""
    return normalize(field_y + field_height - font_size * BASELINE_FACTOR)


def canvas_to_pdf_y(canvas_y: float, box_height: float, page_height: float) -> float:
    """Flip a top-left-origin box Y into the PDF's bottom-left-origin space.

    The flip is its own inverse: applying it to the PDF value gives back the
    canvas value. It must be applied exactly once per field.
    """
    return normalize(page_height - canvas_y - box_height)


def store_drag_coordinate(
    screen_x: float,
    screen_y: float,
    origin_x: float,
    origin_y: float,
    scale: float,
) -> tuple[float, float]:
    """Convert a pointer position on a zoomed canvas to logical page points."""
    return (
        normalize((screen_x - origin_x) / scale),
        normalize((screen_y - origin_y) / scale),
    )


def coordinates_match(first: float, second: float, tolerance: float = MATCH_TOLERANCE) -> bool:
    return abs(first - second) <= tolerance


def format_coordinate(value: float) -> str:
    return f"{value:.{PRECISION_DECIMALS}f}"
