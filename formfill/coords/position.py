"""Resolve a field's stored logical box into render coordinates for one consumer.

The live editor, the static preview, and the PDF fill all go through
``resolve_position`` so that the same stored box lands in the same place in
every view. Stored coordinates are unscaled page points with a top-left
origin. The result is expressed in the consumer's space:

* ``EDIT`` / ``PREVIEW``: zoomed screen space, top-left origin. ``text_y`` is
  the baseline computed in scaled space.
* ``PDF``: unscaled points. ``x``/``y`` keep the calibrated top-left box,
  ``box_bottom`` is the flipped lower-left Y of the box, and ``text_y`` is the
  baseline in bottom-left space.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from formfill.coords.calibration import (
    DEFAULT_CALIBRATION,
    CalibrationConfig,
    RenderContext,
    calibrate,
)
from formfill.coords.precision import (
    BASELINE_FACTOR,
    Box,
    canvas_to_pdf_y,
    format_coordinate,
    normalize,
    normalize_box,
    text_baseline,
    transform,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ResolvedPosition:
    x: float
    y: float
    width: float
    height: float
    text_x: float
    text_y: float
    scale: float
    box_bottom: float

    def pdf_box(self) -> Box:
        """Lower-left anchored box in PDF space (meaningful for the PDF context)."""
        return Box(self.x, self.box_bottom, self.width, self.height)

    def screen_box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)


def resolve_position(
    stored_x: float,
    stored_y: float,
    stored_width: float,
    stored_height: float,
    font_size: float,
    scale: float,
    context: RenderContext,
    page_height: float | None = None,
    calibration: CalibrationConfig = DEFAULT_CALIBRATION,
) -> ResolvedPosition:
    """Compute the renderable box and text anchor for a stored field box.

    ``page_height`` must be a positive page height when ``context`` is PDF;
    it is ignored otherwise. The PDF context is always resolved at scale 1
    by the fill engine.
    """
    stored = normalize_box(stored_x, stored_y, stored_width, stored_height)

    calibrated_x, calibrated_y = calibrate(context, stored.x, stored.y, calibration)
    calibrated_x = normalize(calibrated_x)
    calibrated_y = normalize(calibrated_y)

    x = transform(calibrated_x, scale)
    y = transform(calibrated_y, scale)
    width = transform(stored.width, scale)
    height = transform(stored.height, scale)
    scaled_font_size = transform(font_size, scale)

    if context is RenderContext.PDF:
        pdf_y = canvas_to_pdf_y(calibrated_y, stored.height, float(page_height or 0.0))
        # PDF text is drawn in true point units, so the offset uses the unscaled size.
        text_y = normalize(pdf_y + stored.height - font_size * BASELINE_FACTOR)
        box_bottom = pdf_y
    else:
        text_y = text_baseline(y, height, scaled_font_size)
        box_bottom = normalize(y + height)

    return ResolvedPosition(
        x=x,
        y=y,
        width=width,
        height=height,
        text_x=transform(calibrated_x, scale),
        text_y=text_y,
        scale=scale,
        box_bottom=box_bottom,
    )


def log_field_position(field_id: str, position: ResolvedPosition, context: RenderContext) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "[%s] field %s: x=%s y=%s width=%s height=%s text_x=%s text_y=%s scale=%s",
        context.value.upper(),
        field_id,
        format_coordinate(position.x),
        format_coordinate(position.y),
        format_coordinate(position.width),
        format_coordinate(position.height),
        format_coordinate(position.text_x),
        format_coordinate(position.text_y),
        format_coordinate(position.scale),
    )
