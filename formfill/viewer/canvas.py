"""Interactive PDF page canvas for field placement, dragging, and preview.

Fields are painted at the positions returned by ``resolve_position`` in the
edit context at the current zoom, so the canvas and the filled PDF are fed
from the same arithmetic. Icon fields are painted with the same shape
geometry the fill engine draws into the PDF.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QPainter, QPen, QPixmap, QPolygonF
from PySide6.QtWidgets import QWidget

from formfill.coords.calibration import DEFAULT_CALIBRATION, CalibrationConfig, RenderContext
from formfill.coords.position import ResolvedPosition, resolve_position
from formfill.coords.precision import Box, normalize, store_drag_coordinate
from formfill.model.document import PageSize
from formfill.model.field import Field, FieldType, IconField, TextField, new_field
from formfill.pdf.fonts import Color, parse_hex_color, standard_family, text_anchor_x
from formfill.pdf.icons import Circle, Line, Polygon, Rect, draw_icon

_QT_FAMILIES = {"helvetica": "Helvetica", "times": "Times", "courier": "Courier"}
_MIN_SIDE_PX = 7.0


class _DragMode(str, Enum):
    MOVE = "move"
    RESIZE = "resize"


@dataclass(slots=True)
class _Drag:
    mode: _DragMode
    anchor: QPointF
    start: Box


def _qcolor(color: Color) -> QColor:
    return QColor.fromRgbF(color.red, color.green, color.blue)


class PainterIconSurface:
    """Icon surface over a QPainter whose transform is already flipped to Y-up."""

    def __init__(self, painter: QPainter) -> None:
        self._painter = painter

    def _pen(self, color: Color, thickness: float, filled: bool) -> None:
        pen = QPen(_qcolor(color))
        pen.setWidthF(thickness)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        self._painter.setPen(pen)
        if filled:
            self._painter.setBrush(_qcolor(color))
        else:
            self._painter.setBrush(Qt.BrushStyle.NoBrush)

    def draw_line(self, line: Line, color: Color) -> None:
        self._pen(color, line.thickness, False)
        self._painter.drawLine(QPointF(*line.start), QPointF(*line.end))

    def draw_circle(self, circle: Circle, color: Color) -> None:
        self._pen(color, circle.thickness, circle.filled)
        self._painter.drawEllipse(QPointF(*circle.center), circle.radius, circle.radius)

    def draw_rect(self, rect: Rect, color: Color) -> None:
        self._pen(color, rect.thickness, rect.filled)
        self._painter.drawRect(QRectF(rect.x, rect.y, rect.width, rect.height))

    def draw_polygon(self, polygon: Polygon, color: Color) -> None:
        self._pen(color, polygon.thickness, polygon.filled)
        self._painter.drawPolygon(QPolygonF([QPointF(x, y) for x, y in polygon.points]))


class PdfCanvas(QWidget):
    field_selection_changed = Signal(object)
    fields_changed = Signal()
    field_created = Signal(object)

    def __init__(self, calibration: CalibrationConfig = DEFAULT_CALIBRATION) -> None:
        super().__init__()
        self._calibration = calibration
        self._pixmap: QPixmap | None = None
        self._page_size: PageSize | None = None
        self._page_number = 1
        self._zoom = 1.0
        self._fields: list[Field] = []
        self._values: dict[str, object] = {}
        self._placement_type: FieldType | None = None
        self._selected_id: str | None = None
        self._drag: _Drag | None = None

        self.setMouseTracking(True)
        self.setMinimumSize(500, 600)

    def set_page(
        self,
        pixmap: QPixmap,
        fields: list[Field],
        page_size: PageSize,
        page_number: int,
        zoom: float,
    ) -> None:
        self._pixmap = pixmap
        self._fields = fields
        self._page_size = page_size
        self._page_number = page_number
        self._zoom = zoom
        self._drag = None
        self._selected_id = None
        self.field_selection_changed.emit(None)
        self.resize(pixmap.size())
        self.update()

    def set_preview_values(self, values: dict[str, object]) -> None:
        self._values = dict(values)
        self.update()

    def clear_page(self) -> None:
        self._pixmap = None
        self._fields = []
        self._page_size = None
        self._selected_id = None
        self._drag = None
        self.resize(500, 600)
        self.update()

    def set_placement_type(self, field_type: FieldType | None) -> None:
        self._placement_type = field_type

    def field_position(self, field: Field) -> ResolvedPosition:
        return resolve_position(
            field.x,
            field.y,
            field.width,
            field.height,
            field.font_metric,
            self._zoom,
            RenderContext.EDIT,
            calibration=self._calibration,
        )

    def paintEvent(self, event) -> None:  # type: ignore[override]
        del event
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor("#e9eaee"))

        if self._pixmap is None or self._page_size is None:
            return

        painter.drawPixmap(0, 0, self._pixmap)
        for field in self._fields:
            if not field.is_visible:
                continue
            position = self.field_position(field)
            rect_px = self._screen_rect(position)

            if isinstance(field, IconField):
                self._paint_icon(painter, field, rect_px)
            elif isinstance(field, TextField):
                self._paint_text(painter, field, position)

            selected = field.id == self._selected_id
            pen = QPen(QColor("#c62828") if selected else QColor("#1565c0"))
            pen.setWidth(2)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(rect_px)
            if selected:
                painter.fillRect(self._resize_handle_rect(rect_px), QColor("#c62828"))

    def _paint_icon(self, painter: QPainter, field: IconField, rect_px: QRectF) -> None:
        painter.save()
        painter.translate(0.0, rect_px.top() + rect_px.bottom())
        painter.scale(1.0, -1.0)
        box = Box(rect_px.x(), rect_px.y(), rect_px.width(), rect_px.height())
        draw_icon(PainterIconSurface(painter), field.icon_variant, box, parse_hex_color(field.icon_color))
        painter.restore()

    def _paint_text(self, painter: QPainter, field: TextField, position: ResolvedPosition) -> None:
        value = self._values.get(field.slug)
        text = value if isinstance(value, str) and value.strip() else field.label
        font = QFont(_QT_FAMILIES[standard_family(field.font_family)])
        font.setPointSizeF(max(1.0, field.font_size * self._zoom))
        font.setBold(field.font_weight.value == "bold")
        font.setItalic(field.font_style.value == "italic")
        width = QFontMetricsF(font).horizontalAdvance(text)
        anchor_x = text_anchor_x(position.text_x, position.width, width, field.text_align)

        painter.save()
        painter.setFont(font)
        painter.setPen(_qcolor(parse_hex_color(field.text_color)))
        painter.drawText(QPointF(anchor_x, position.text_y), text)
        painter.restore()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if self._pixmap is None or self._page_size is None:
            return

        if event.button() != Qt.MouseButton.LeftButton:
            return

        if self._placement_type is not None:
            self._create_field_at(event.position())
            return

        clicked = self._field_at(event.position())
        self._selected_id = clicked.id if clicked is not None else None
        self._drag = None
        self.field_selection_changed.emit(clicked)

        if clicked is not None:
            position = self.field_position(clicked)
            on_handle = self._resize_handle_rect(self._screen_rect(position)).contains(event.position())
            self._drag = _Drag(
                mode=_DragMode.RESIZE if on_handle else _DragMode.MOVE,
                anchor=QPointF(event.position()),
                start=Box(clicked.x, clicked.y, clicked.width, clicked.height),
            )

        self.update()

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        field = self.selected_field()
        if field is None or self._drag is None or self._page_size is None:
            return

        pos = event.position()
        dx, dy = store_drag_coordinate(pos.x(), pos.y(), self._drag.anchor.x(), self._drag.anchor.y(), self._zoom)
        if self._drag.mode is _DragMode.MOVE:
            self._move_field(field, self._drag.start, dx, dy)
        else:
            self._resize_field(field, self._drag.start, dx, dy)
        self.fields_changed.emit()
        self.update()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        del event
        self._drag = None

    def _move_field(self, field: Field, start: Box, dx: float, dy: float) -> None:
        page = self._page_size
        field.x = normalize(max(0.0, min(start.x + dx, page.width - field.width)))
        field.y = normalize(max(0.0, min(start.y + dy, page.height - field.height)))

    def _resize_field(self, field: Field, start: Box, dx: float, dy: float) -> None:
        page = self._page_size
        min_side = _MIN_SIDE_PX / max(self._zoom, 1e-9)
        if field.field_type is FieldType.ICON:
            # Icons stay square.
            room = min(page.width - field.x, page.height - field.y)
            side = normalize(max(min_side, min(max(start.width + dx, start.height + dy), room)))
            field.width = side
            field.height = side
        else:
            field.width = normalize(min(max(min_side, start.width + dx), page.width - field.x))
            field.height = normalize(min(max(min_side, start.height + dy), page.height - field.y))

    def select_field(self, field_id: str | None) -> None:
        self._selected_id = field_id
        self._drag = None
        self.field_selection_changed.emit(self.selected_field())
        self.update()

    def selected_field(self) -> Field | None:
        for field in self._fields:
            if field.id == self._selected_id:
                return field
        return None

    def delete_selected_field(self) -> bool:
        field = self.selected_field()
        if field is None:
            return False
        self._fields.remove(field)
        self._selected_id = None
        self._drag = None
        self.field_selection_changed.emit(None)
        self.fields_changed.emit()
        self.update()
        return True

    def _create_field_at(self, pos: QPointF) -> None:
        if self._page_size is None or self._placement_type is None:
            return

        x_pt, y_pt = self._logical_point(pos)
        field = new_field(self._placement_type, self._page_number, x_pt, y_pt, slug="")
        field.x = max(0.0, min(field.x, self._page_size.width - field.width))
        field.y = max(0.0, min(field.y, self._page_size.height - field.height))

        self._fields.append(field)
        self._selected_id = field.id
        self.field_selection_changed.emit(field)
        self.field_created.emit(field)
        self.fields_changed.emit()
        self.update()

    def _logical_point(self, pos: QPointF) -> tuple[float, float]:
        """Pointer position to stored coordinates, undoing the on-screen calibration."""
        x_pt, y_pt = store_drag_coordinate(pos.x(), pos.y(), 0.0, 0.0, self._zoom)
        offset = self._calibration.offset_for(RenderContext.EDIT)
        return normalize(x_pt - offset.dx), normalize(y_pt - offset.dy)

    @staticmethod
    def _screen_rect(position: ResolvedPosition) -> QRectF:
        box = position.screen_box()
        return QRectF(box.x, box.y, box.width, box.height)

    def _resize_handle_rect(self, field_rect: QRectF) -> QRectF:
        handle_size = 10.0
        return QRectF(
            field_rect.right() - handle_size / 2.0,
            field_rect.bottom() - handle_size / 2.0,
            handle_size,
            handle_size,
        )

    def _field_at(self, pos: QPointF) -> Field | None:
        for field in reversed(self._fields):
            position = self.field_position(field)
            if self._screen_rect(position).contains(pos):
                return field
        return None
