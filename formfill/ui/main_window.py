"""Main application window for placing fields, previewing values, and filling."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QActionGroup, QKeySequence, QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QScrollArea,
    QSplitter,
    QToolBar,
)

from formfill.config import Settings
from formfill.model.document import PdfDocument
from formfill.model.field import FieldType
from formfill.pdf.filler import PdfFillError, fill_document
from formfill.pdf.importer import PdfImportError, import_pdf_fields
from formfill.pdf.loader import PdfLoadError, load_pdf
from formfill.pdf.renderer import PdfRenderError, render_page_image
from formfill.state.session import DocumentSession, JsonFieldStore
from formfill.viewer.canvas import PdfCanvas

logger = logging.getLogger(__name__)

ZOOM_STEP = 0.1
MIN_ZOOM = 0.3
MAX_ZOOM = 3.0

_PLACEMENT_ACTIONS = (
    ("Text", FieldType.TEXT),
    ("Date", FieldType.DATE),
    ("Icon", FieldType.ICON),
    ("Signature", FieldType.SIGNATURE),
    ("Image", FieldType.IMAGE),
    ("Fillable", FieldType.FILLABLE),
)


class MainWindow(QMainWindow):
    """Editor window: page list, zoomable page canvas, and the page's field list."""

    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self.setWindowTitle("PDF Form Filler")
        self.resize(1400, 900)

        self._settings = settings
        self._calibration = settings.calibration()
        self._store = JsonFieldStore(settings.field_store_dir)
        self._document: PdfDocument | None = None
        self._session = DocumentSession()
        self._values: dict[str, object] = {}
        self._current_page = 1
        self._zoom = 1.25
        self._slug_counter = 1

        self.canvas = PdfCanvas(self._calibration)
        self.canvas.fields_changed.connect(self._on_canvas_fields_changed)
        self.canvas.field_created.connect(self._on_canvas_field_created)
        self.canvas.field_selection_changed.connect(self._on_canvas_selection_changed)

        self.setCentralWidget(self._build_panels())
        self._build_toolbar()
        self.statusBar().showMessage("Ready")

    def _build_panels(self) -> QSplitter:
        self.page_list = QListWidget()
        self.page_list.currentRowChanged.connect(self._on_page_selected)

        self.field_list = QListWidget()
        self.field_list.currentItemChanged.connect(self._on_field_item_changed)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(False)
        scroll_area.setAlignment(Qt.AlignmentFlag.AlignCenter)
        scroll_area.setWidget(self.canvas)

        panels = QSplitter()
        for stretch, widget in ((1, self.page_list), (5, scroll_area), (2, self.field_list)):
            panels.addWidget(widget)
            panels.setStretchFactor(panels.count() - 1, stretch)
        return panels

    def _add_actions(self, toolbar: QToolBar, entries) -> None:
        for label, handler in entries:
            action = QAction(label, self)
            action.triggered.connect(handler)
            toolbar.addAction(action)

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Editor")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self._add_actions(
            toolbar,
            (
                ("Open PDF", self.open_pdf),
                ("Save Fields", self.save_fields),
                ("Load Values", self.load_values),
                ("Fill PDF", self.fill_pdf),
                ("Delete Field", self.delete_selected_field),
            ),
        )
        toolbar.addSeparator()
        self._add_actions(
            toolbar,
            (
                ("Previous", self.show_previous_page),
                ("Next", self.show_next_page),
                ("Zoom In", lambda: self.set_zoom(self._zoom + ZOOM_STEP)),
                ("Zoom Out", lambda: self.set_zoom(self._zoom - ZOOM_STEP)),
            ),
        )
        toolbar.addSeparator()

        placement = QActionGroup(self)
        placement.setExclusive(True)
        self._pointer_action = QAction("Pointer", self)
        for action, mode in [(self._pointer_action, None)] + [
            (QAction(f"Add {label}", self), field_type) for label, field_type in _PLACEMENT_ACTIONS
        ]:
            action.setCheckable(True)
            action.triggered.connect(lambda _checked=False, kind=mode: self._set_mode(kind))
            placement.addAction(action)
            toolbar.addAction(action)
        self._pointer_action.setChecked(True)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._close_document()
        super().closeEvent(event)

    def open_pdf(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Open PDF", str(Path.home()), "PDF Files (*.pdf)")
        if not file_path:
            return

        self._close_document()
        try:
            self._document = load_pdf(file_path)
        except PdfLoadError as exc:
            QMessageBox.critical(self, "Open Failed", str(exc))
            return

        document_id = self._document.path.stem
        self._session = DocumentSession(document_id=document_id)
        try:
            stored = self._store.list_fields(document_id)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable saved fields for %s: %s", document_id, exc)
            stored = []
        if stored:
            self._session.replace_all(stored)
        else:
            try:
                self._session.replace_all(import_pdf_fields(self._document.working_path))
            except PdfImportError as exc:
                QMessageBox.warning(self, "Field Import Warning", str(exc))
        self._sync_slug_counter()
        self._current_page = 1
        self._populate_page_list()
        self._render_current_page()
        self.statusBar().showMessage(f"Loaded: {file_path} ({len(self._session.fields)} field(s))")

    def save_fields(self) -> None:
        if self._document is None:
            return
        duplicates = self._session.duplicate_slugs()
        if duplicates:
            QMessageBox.warning(self, "Duplicate Slugs", "Slugs must be unique: " + ", ".join(sorted(duplicates)))
            return
        count = self._store.replace_fields(self._session.document_id, self._session.all_fields())
        self.statusBar().showMessage(f"Saved {count} field(s)")

    def load_values(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Load Values", str(Path.home()), "JSON Files (*.json)")
        if not file_path:
            return
        try:
            values = json.loads(Path(file_path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            QMessageBox.critical(self, "Load Failed", str(exc))
            return
        if not isinstance(values, dict):
            QMessageBox.critical(self, "Load Failed", "Values file must contain a JSON object.")
            return
        self._values = values
        self.canvas.set_preview_values(values)
        self.statusBar().showMessage(f"Loaded {len(values)} value(s)")

    def fill_pdf(self) -> None:
        if self._document is None:
            QMessageBox.information(self, "No Document", "Open a PDF first.")
            return

        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save Filled PDF",
            str(self._document.path.with_stem(f"{self._document.path.stem}_filled")),
            "PDF Files (*.pdf)",
        )
        if not output_path:
            return

        try:
            filled = fill_document(
                self._document.read_bytes(),
                self._session.all_fields(),
                self._values,
                calibration=self._calibration,
            )
            Path(output_path).write_bytes(filled)
        except (PdfFillError, OSError) as exc:
            logger.exception("Fill failed")
            QMessageBox.critical(self, "Fill Failed", str(exc))
            return

        self.statusBar().showMessage(f"Saved: {output_path}")

    def set_zoom(self, zoom: float) -> None:
        self._zoom = round(max(MIN_ZOOM, min(MAX_ZOOM, zoom)), 2)
        self._render_current_page()

    def show_previous_page(self) -> None:
        if self._document is None or self._current_page <= 1:
            return
        self.page_list.setCurrentRow(self._current_page - 2)

    def show_next_page(self) -> None:
        if self._document is None or self._current_page >= self._document.page_count:
            return
        self.page_list.setCurrentRow(self._current_page)

    def delete_selected_field(self) -> None:
        if self._document is None:
            return
        selected = self.canvas.selected_field()
        if selected is not None and self.canvas.delete_selected_field():
            self._session.remove(selected.id)
            self._refresh_field_list()
            self.statusBar().showMessage(f"Deleted field {selected.slug}")
        else:
            self.statusBar().showMessage("No selected field to delete.")

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_Delete:
            self.delete_selected_field()
            event.accept()
            return
        if event.matches(QKeySequence.StandardKey.ZoomIn):
            self.set_zoom(self._zoom + ZOOM_STEP)
            event.accept()
            return
        if event.matches(QKeySequence.StandardKey.ZoomOut):
            self.set_zoom(self._zoom - ZOOM_STEP)
            event.accept()
            return
        super().keyPressEvent(event)

    def _set_mode(self, mode: FieldType | None) -> None:
        self.canvas.set_placement_type(mode)
        label = "Pointer mode" if mode is None else f"Placement mode: {mode.value}"
        self.statusBar().showMessage(label)

    def _populate_page_list(self) -> None:
        self.page_list.clear()
        if self._document is None:
            return
        for page_number in range(1, self._document.page_count + 1):
            self.page_list.addItem(QListWidgetItem(f"Page {page_number}"))
        self.page_list.setCurrentRow(0)

    def _on_page_selected(self, row: int) -> None:
        if self._document is None or row < 0:
            return
        self._current_page = row + 1
        self._render_current_page()

    def _on_canvas_fields_changed(self) -> None:
        count = len(self._session.page_fields(self._current_page))
        self.statusBar().showMessage(f"Page {self._current_page}: {count} field(s)")

    def _on_canvas_field_created(self, field) -> None:
        field.slug = self._next_slug(field.field_type)
        field.label = field.slug
        self._session.add(field)
        self._refresh_field_list()
        self._pointer_action.setChecked(True)
        self._set_mode(None)

    def _next_slug(self, field_type: FieldType) -> str:
        slug = f"{field_type.value.lower()}_{self._slug_counter}"
        self._slug_counter += 1
        return slug

    def _sync_slug_counter(self) -> None:
        highest = 0
        for field in self._session.all_fields():
            _, _, suffix = field.slug.rpartition("_")
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        self._slug_counter = highest + 1

    def _render_current_page(self) -> None:
        if self._document is None:
            self.canvas.clear_page()
            return

        try:
            image = render_page_image(self._document.handle, self._current_page, zoom=self._zoom)
        except PdfRenderError as exc:
            QMessageBox.critical(self, "Render Failed", str(exc))
            return

        self.canvas.set_page(
            pixmap=QPixmap.fromImage(image),
            fields=self._session.page_fields(self._current_page),
            page_size=self._document.page_size(self._current_page),
            page_number=self._current_page,
            zoom=self._zoom,
        )
        self.canvas.set_preview_values(self._values)
        self._refresh_field_list()
        self.statusBar().showMessage(
            f"Page {self._current_page}/{self._document.page_count} at {int(self._zoom * 100)}%"
        )

    def _close_document(self) -> None:
        if self._document is not None:
            self._document.discard()
            self._document = None
        self._session = DocumentSession()
        self.page_list.clear()
        self.canvas.clear_page()
        self.field_list.clear()

    def _refresh_field_list(self) -> None:
        self.field_list.blockSignals(True)
        self.field_list.clear()
        selected = self.canvas.selected_field()
        for field in self._session.page_fields(self._current_page):
            item = QListWidgetItem(f"{field.slug} ({field.field_type.value})")
            item.setData(Qt.ItemDataRole.UserRole, field.id)
            self.field_list.addItem(item)
            if selected is not None and field.id == selected.id:
                self.field_list.setCurrentItem(item)
        self.field_list.blockSignals(False)

    def _on_field_item_changed(self, current: QListWidgetItem | None, _previous) -> None:
        self.canvas.select_field(current.data(Qt.ItemDataRole.UserRole) if current is not None else None)

    def _on_canvas_selection_changed(self, field) -> None:
        self._session.select(field.id if field is not None else None)
        self.field_list.blockSignals(True)
        self.field_list.setCurrentItem(None)
        for row in range(self.field_list.count()):
            item = self.field_list.item(row)
            if field is not None and item.data(Qt.ItemDataRole.UserRole) == field.id:
                self.field_list.setCurrentItem(item)
                break
        self.field_list.blockSignals(False)
