from __future__ import annotations

import pytest

from conftest import make_pdf
from formfill.coords.calibration import ZERO_CALIBRATION
from formfill.model.field import FieldType, FillableField, IconField, IconVariant
from formfill.pdf.filler import fill_document
from formfill.pdf.importer import PdfImportError, import_pdf_fields


def _form(report) -> None:
    report.acroForm.textfield(name="full_name", tooltip="Full name", x=72, y=600, width=200, height=20, fontSize=10)
    report.acroForm.checkbox(name="agree", x=72, y=500, size=20, checked=True)
    report.acroForm.checkbox(name="decline", x=120, y=500, size=20, checked=False)


def test_text_widgets_become_fillable_fields():
    imported = {item.slug: item for item in import_pdf_fields(make_pdf(with_form=_form))}

    name = imported["full_name"]
    assert isinstance(name, FillableField)
    assert name.field_type is FieldType.FILLABLE
    assert name.page_number == 1
    assert name.x == pytest.approx(72.0)
    assert name.y == pytest.approx(792.0 - 600.0 - 20.0)
    assert (name.width, name.height) == pytest.approx((200.0, 20.0))
    assert name.font_size == 10.0
    assert name.placeholder == "Full name"


def test_checkboxes_become_check_icons():
    imported = {item.slug: item for item in import_pdf_fields(make_pdf(with_form=_form))}

    agree = imported["agree"]
    assert isinstance(agree, IconField)
    assert agree.icon_variant is IconVariant.CHECK
    assert agree.default_visible is True
    assert agree.y == pytest.approx(792.0 - 500.0 - 20.0)
    assert imported["decline"].default_visible is False


def test_pdf_without_form_has_no_fields(blank_pdf):
    assert import_pdf_fields(blank_pdf) == []


def test_filled_widgets_import_at_their_stored_position(blank_pdf, png_fetcher):
    placed = FillableField(
        id="id-notes", slug="notes", label="Notes", page_number=1, x=90.0, y=250.0, width=180.0, height=24.0
    )
    output = fill_document(blank_pdf, [placed], {}, calibration=ZERO_CALIBRATION, fetcher=png_fetcher)

    (imported,) = import_pdf_fields(output)
    assert imported.slug == "notes_1"
    assert (imported.x, imported.y) == pytest.approx((90.0, 250.0), abs=0.01)
    assert (imported.width, imported.height) == pytest.approx((180.0, 24.0), abs=0.01)


def test_reads_from_a_path(tmp_path):
    path = tmp_path / "form.pdf"
    path.write_bytes(make_pdf(with_form=_form))
    assert len(import_pdf_fields(path)) == 3


def test_unreadable_source():
    with pytest.raises(PdfImportError):
        import_pdf_fields(b"%PDF-garbage")
