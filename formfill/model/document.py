"""Document model: page geometry plus the editor's working copy of a source PDF."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

import fitz


@dataclass(slots=True, frozen=True)
class PageSize:
    width: float
    height: float


@dataclass(slots=True)
class PdfDocument:
    """An opened source PDF.

    The editor works on a temporary copy so that fills and saves never touch
    the user's original until they choose an output path.
    """

    path: Path
    working_path: Path
    handle: fitz.Document

    @property
    def page_count(self) -> int:
        return self.handle.page_count

    def page_size(self, page_number: int) -> PageSize:
        """Size in points of the 1-indexed ``page_number``."""
        rect = self.handle.load_page(page_number - 1).rect
        return PageSize(width=float(rect.width), height=float(rect.height))

    def page_sizes(self) -> list[PageSize]:
        return [self.page_size(number) for number in range(1, self.page_count + 1)]

    def read_bytes(self) -> bytes:
        return self.working_path.read_bytes()

    def release(self) -> None:
        if not self.handle.is_closed:
            self.handle.close()

    def reacquire(self) -> None:
        if self.handle.is_closed:
            self.handle = fitz.open(self.working_path)

    def discard(self) -> None:
        self.release()
        if self.working_path != self.path:
            with suppress(FileNotFoundError):
                self.working_path.unlink()
