from __future__ import annotations

import base64
from io import BytesIO

import fitz
import pytest
from reportlab.pdfgen import canvas

from formfill.pdf.images import FetchedBlob, ImageFetchError

LETTER = (612.0, 792.0)


def make_pdf(page_count: int = 1, pagesize: tuple[float, float] = LETTER, with_form=None) -> bytes:
    """Blank PDF built with reportlab; ``with_form(canvas)`` may add widgets to page 1."""
    buffer = BytesIO()
    report = canvas.Canvas(buffer, pagesize=pagesize)
    for index in range(page_count):
        if index == 0 and with_form is not None:
            with_form(report)
        report.showPage()
    report.save()
    return buffer.getvalue()


def png_bytes(width: int = 4, height: int = 2) -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(0)
    return pix.tobytes("png")


class RecordingSurface:
    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def draw_line(self, line, color) -> None:
        self.calls.append(("line", line))

    def draw_circle(self, circle, color) -> None:
        self.calls.append(("circle", circle))

    def draw_rect(self, rect, color) -> None:
        self.calls.append(("rect", rect))

    def draw_polygon(self, polygon, color) -> None:
        self.calls.append(("polygon", polygon))


class StubFetcher:
    def __init__(self, blob: FetchedBlob | None = None, error: Exception | None = None) -> None:
        self.blob = blob
        self.error = error
        self.urls: list[str] = []

    def fetch(self, url: str) -> FetchedBlob:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        assert self.blob is not None
        return self.blob


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def three_page_pdf() -> bytes:
    return make_pdf(page_count=3)


@pytest.fixture
def png_data_url() -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes()).decode("ascii")


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def unreachable_fetcher() -> StubFetcher:
    return StubFetcher(error=ImageFetchError("Failed to fetch image: https://example.invalid/sig.png"))


@pytest.fixture
def png_fetcher() -> StubFetcher:
    return StubFetcher(blob=FetchedBlob(content_type="image/png", content=png_bytes()))


def open_pdf(data: bytes) -> fitz.Document:
    return fitz.open(stream=data, filetype="pdf")
