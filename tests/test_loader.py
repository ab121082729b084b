from __future__ import annotations

import pytest

from conftest import make_pdf
from formfill.model.document import PageSize
from formfill.pdf.loader import PdfLoadError, load_pdf


def test_load_pdf_works_on_a_copy(tmp_path):
    source = tmp_path / "source.pdf"
    source.write_bytes(make_pdf(page_count=2, pagesize=(300.0, 400.0)))

    document = load_pdf(source)
    try:
        assert document.working_path != source
        assert document.working_path.name.startswith(".formfill_")
        assert document.page_count == 2
        assert document.page_size(1) == PageSize(300.0, 400.0)
        assert document.page_sizes() == [PageSize(300.0, 400.0)] * 2
        assert document.read_bytes() == source.read_bytes()

        document.release()
        assert document.handle.is_closed
        document.reacquire()
        assert document.page_count == 2
    finally:
        document.discard()

    assert not document.working_path.exists()
    assert source.exists()


def test_load_missing_file(tmp_path):
    with pytest.raises(PdfLoadError):
        load_pdf(tmp_path / "missing.pdf")
