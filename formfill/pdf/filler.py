"""Fill a PDF by drawing field values onto a reportlab overlay and merging it.

Fields are drawn in the order given, grouped by page; later fields paint
over earlier ones. Every field box is resolved in the PDF context at scale 1
through ``resolve_position`` so the output matches the editor and preview.

Failure policy: a field whose value cannot be rendered is logged and
skipped, and filling continues. Only document-level problems (unreadable
source, serialization) raise ``PdfFillError``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from io import BytesIO
import logging
from typing import Any

from pypdf import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from formfill.config import get_settings
from formfill.coords.calibration import DEFAULT_CALIBRATION, CalibrationConfig, RenderContext
from formfill.coords.position import ResolvedPosition, log_field_position, resolve_position
from formfill.coords.precision import normalize
from formfill.model.field import (
    Field,
    FillableField,
    IconField,
    ImageField,
    TextField,
    parse_bool_value,
)
from formfill.pdf.fonts import Color, parse_hex_color, resolve_font, text_anchor_x, text_width
from formfill.pdf.icons import Circle, Line, Polygon, Rect, draw_icon
from formfill.pdf.images import (
    HttpImageFetcher,
    ImageFetcher,
    ImageFetchError,
    UnsupportedImageError,
    contain_fit,
    load_image_value,
)
from formfill.pdf.writer import PdfWriteError, existing_field_names, merge_overlay, write_pdf

logger = logging.getLogger(__name__)

PositionOverrides = Mapping[str, Mapping[str, float]]


class PdfFillError(RuntimeError):
    """Raised when the document as a whole cannot be filled."""


@dataclass(slots=True, frozen=True)
class PageGeometry:
    left: float
    bottom: float
    width: float
    height: float


class OverlaySurface:
    """Icon surface drawing onto a reportlab canvas in PDF coordinates."""

    def __init__(self, pdf_canvas: canvas.Canvas) -> None:
        self._canvas = pdf_canvas

    def _pen(self, color: Color, thickness: float) -> None:
        self._canvas.setStrokeColorRGB(*color)
        self._canvas.setFillColorRGB(*color)
        self._canvas.setLineWidth(thickness)
        self._canvas.setLineCap(1)
        self._canvas.setLineJoin(1)

    def draw_line(self, line: Line, color: Color) -> None:
        self._pen(color, line.thickness)
        self._canvas.line(line.start[0], line.start[1], line.end[0], line.end[1])

    def draw_circle(self, circle: Circle, color: Color) -> None:
        self._pen(color, circle.thickness)
        cx, cy = circle.center
        self._canvas.circle(cx, cy, circle.radius, stroke=1, fill=int(circle.filled))

    def draw_rect(self, rect: Rect, color: Color) -> None:
        self._pen(color, rect.thickness)
        self._canvas.rect(rect.x, rect.y, rect.width, rect.height, stroke=1, fill=int(rect.filled))

    def draw_polygon(self, polygon: Polygon, color: Color) -> None:
        self._pen(color, polygon.thickness)
        path = self._canvas.beginPath()
        first, *rest = polygon.points
        path.moveTo(*first)
        for point in rest:
            path.lineTo(*point)
        path.close()
        self._canvas.drawPath(path, stroke=1, fill=int(polygon.filled))


def fill_document(
    source: bytes,
    fields: Iterable[Field],
    values: Mapping[str, Any],
    position_overrides: PositionOverrides | None = None,
    *,
    calibration: CalibrationConfig = DEFAULT_CALIBRATION,
    fetcher: ImageFetcher | None = None,
) -> bytes:
    """Draw ``values`` for ``fields`` onto a copy of ``source`` and return the PDF bytes.

    ``values`` is keyed by field slug. ``position_overrides`` maps a field id
    to ``{"x": ..., "y": ...}`` logical coordinates that replace the stored
    ones for this fill only.
    """
    try:
        reader = PdfReader(BytesIO(source))
        writer = PdfWriter(clone_from=reader)
        geometry = [
            PageGeometry(
                left=float(page.mediabox.left),
                bottom=float(page.mediabox.bottom),
                width=float(page.mediabox.width),
                height=float(page.mediabox.height),
            )
            for page in reader.pages
        ]
        reserved_names = existing_field_names(reader)
    except Exception as exc:
        raise PdfFillError("Failed to read source PDF") from exc

    if fetcher is None:
        settings = get_settings()
        fetcher = HttpImageFetcher(timeout=settings.image_fetch_timeout, max_bytes=settings.image_max_bytes)

    session = _FillSession(
        geometry=geometry,
        values=values,
        overrides=position_overrides or {},
        calibration=calibration,
        fetcher=fetcher,
        reserved_names=reserved_names,
    )
    try:
        overlay, touched_pages = session.build_overlay(list(fields))
    except Exception as exc:
        raise PdfFillError("Failed to build the field overlay") from exc

    try:
        if touched_pages:
            merge_overlay(writer, PdfReader(overlay), touched_pages)
        return write_pdf(writer)
    except PdfWriteError as exc:
        raise PdfFillError(str(exc)) from exc
    except Exception as exc:
        raise PdfFillError("Failed to merge filled fields into the PDF") from exc


class _FillSession:
    """State for one fill call; owns the overlay canvas for its whole lifetime."""

    def __init__(
        self,
        geometry: list[PageGeometry],
        values: Mapping[str, Any],
        overrides: PositionOverrides,
        calibration: CalibrationConfig,
        fetcher: ImageFetcher,
        reserved_names: set[str],
    ) -> None:
        self._geometry = geometry
        self._values = values
        self._overrides = overrides
        self._calibration = calibration
        self._fetcher = fetcher
        self._used_names = set(reserved_names)
        self._name_counter = 0

    def build_overlay(self, fields: list[Field]) -> tuple[BytesIO, set[int]]:
        grouped: dict[int, list[Field]] = defaultdict(list)
        for field in fields:
            page_index = field.page_number - 1
            if 0 <= page_index < len(self._geometry):
                grouped[page_index].append(field)
            else:
                logger.debug("Field %s targets missing page %s; skipped", field.slug, field.page_number)

        buffer = BytesIO()
        first = self._geometry[0] if self._geometry else PageGeometry(0.0, 0.0, 612.0, 792.0)
        report = canvas.Canvas(buffer, pagesize=(first.width, first.height))
        touched: set[int] = set()
        drawn = 0

        for page_index, page in enumerate(self._geometry):
            report.setPageSize((page.width, page.height))
            report.saveState()
            report.translate(page.left, page.bottom)
            for field in grouped.get(page_index, []):
                if self._draw_field(report, field, page):
                    touched.add(page_index)
                    drawn += 1
            report.restoreState()
            report.showPage()

        report.save()
        buffer.seek(0)
        logger.info("Filled %d of %d field(s) across %d page(s)", drawn, len(fields), len(touched))
        return buffer, touched

    def _draw_field(self, report: canvas.Canvas, field: Field, page: PageGeometry) -> bool:
        value = self._values.get(field.slug)
        if isinstance(field, IconField):
            visible = field.default_visible if value is None else parse_bool_value(value)
            if not visible:
                return False
        elif not isinstance(field, FillableField) and value is None:
            return False

        report.saveState()
        try:
            position = self._resolve(field, page)
            if isinstance(field, TextField):
                return self._draw_text(report, field, value, position)
            if isinstance(field, IconField):
                draw_icon(OverlaySurface(report), field.icon_variant, position.pdf_box(), parse_hex_color(field.icon_color))
                return True
            if isinstance(field, ImageField):
                return self._draw_image(report, field, value, position)
            return self._add_native_field(report, field, value, position)
        except (UnsupportedImageError, ImageFetchError) as exc:
            logger.warning("Skipping %s field %s (%s): %s", field.field_type.value, field.id, field.slug, exc)
        except Exception:
            logger.warning(
                "Failed to draw %s field %s (%s)",
                field.field_type.value,
                field.id,
                field.slug,
                exc_info=True,
            )
        finally:
            report.restoreState()
        return False

    def _resolve(self, field: Field, page: PageGeometry) -> ResolvedPosition:
        override = self._overrides.get(field.id) or {}
        position = resolve_position(
            float(override.get("x", field.x)),
            float(override.get("y", field.y)),
            field.width,
            field.height,
            field.font_metric,
            1.0,
            RenderContext.PDF,
            page.height,
            self._calibration,
        )
        log_field_position(field.id, position, RenderContext.PDF)
        return position

    def _draw_text(self, report: canvas.Canvas, field: TextField, value: Any, position: ResolvedPosition) -> bool:
        if not isinstance(value, str) or not value.strip():
            return False
        font_name = resolve_font(field.font_family, field.font_weight, field.font_style)
        font_size = normalize(field.font_size)
        anchor_x = text_anchor_x(
            position.x,
            position.width,
            text_width(value, font_name, font_size),
            field.text_align,
        )
        report.setFillColorRGB(*parse_hex_color(field.text_color))
        report.setFont(font_name, font_size)
        report.drawString(anchor_x, position.text_y, value)
        return True

    def _draw_image(self, report: canvas.Canvas, field: ImageField, value: Any, position: ResolvedPosition) -> bool:
        payload = load_image_value(value, self._fetcher)
        image = ImageReader(BytesIO(payload.data))
        image_width, image_height = image.getSize()
        placed = contain_fit(position.pdf_box(), float(image_width), float(image_height))
        report.drawImage(image, placed.x, placed.y, width=placed.width, height=placed.height, mask="auto")
        logger.debug("Placed %s image for %s at %s", payload.kind, field.slug, placed)
        return True

    def _add_native_field(
        self,
        report: canvas.Canvas,
        field: FillableField,
        value: Any,
        position: ResolvedPosition,
    ) -> bool:
        box = position.pdf_box()
        has_border = bool(field.border_color) and field.border_width > 0
        report.acroForm.textfield(
            name=self._unique_name(field.slug),
            tooltip=field.placeholder or field.label or None,
            value=value if isinstance(value, str) else "",
            x=box.x,
            y=box.y,
            width=box.width,
            height=box.height,
            relative=True,
            fontName=resolve_font(field.font_family),
            fontSize=field.font_size,
            textColor=colors.Color(*parse_hex_color(field.text_color)),
            borderColor=colors.Color(*parse_hex_color(field.border_color)) if has_border else None,
            borderWidth=field.border_width if has_border else 0,
            fillColor=None,
            forceBorder=has_border,
        )
        return True

    def _unique_name(self, slug: str) -> str:
        base = slug or "field"
        while True:
            self._name_counter += 1
            name = f"{base}_{self._name_counter}"
            if name not in self._used_names:
                self._used_names.add(name)
                return name
