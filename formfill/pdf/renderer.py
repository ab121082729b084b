"""Page rasterisation for the editor and static preview, using PyMuPDF."""

from __future__ import annotations

import fitz
from PySide6.QtGui import QImage


class PdfRenderError(RuntimeError):
    """Raised when a page cannot be rendered."""


def render_page_image(document: fitz.Document, page_number: int, zoom: float = 1.0) -> QImage:
    """Render the 1-indexed ``page_number`` at ``zoom`` pixels per point.

    The zoom passed here must be the same scale handed to ``resolve_position``
    for the fields drawn over the image.
    """
    if page_number < 1 or page_number > document.page_count:
        raise PdfRenderError(f"Page out of range: {page_number}")

    try:
        page = document.load_page(page_number - 1)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False, annots=False)
    except Exception as exc:  # pragma: no cover - defensive for PyMuPDF errors
        raise PdfRenderError(f"Failed to render page {page_number}") from exc

    image = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888)
    return image.copy()
