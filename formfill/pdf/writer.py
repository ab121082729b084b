"""Merge a drawn overlay into the source document with pypdf."""

from __future__ import annotations

from io import BytesIO

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.generic import ArrayObject, BooleanObject, DictionaryObject, IndirectObject, NameObject


class PdfWriteError(RuntimeError):
    """Raised when output generation fails."""


def existing_field_names(reader: PdfReader) -> set[str]:
    return set((reader.get_fields() or {}).keys())


def merge_overlay(writer: PdfWriter, overlay_reader: PdfReader, page_indexes: set[int]) -> None:
    """Stamp overlay pages onto the matching writer pages.

    Widget annotations on the overlay are moved into the target page and
    registered in the document AcroForm; the remaining content is merged on
    top of the existing page content, preserving drawing order.
    """
    field_refs = ArrayObject()

    for page_index in sorted(page_indexes):
        overlay_page = overlay_reader.pages[page_index]
        target_page = writer.pages[page_index]

        field_refs.extend(_transfer_widget_annotations(overlay_page, target_page, writer))
        if "/Annots" in overlay_page:
            del overlay_page[NameObject("/Annots")]
        target_page.merge_page(overlay_page)

    if field_refs:
        overlay_form = overlay_reader.trailer["/Root"].get("/AcroForm")
        resources = overlay_form.get_object().get("/DR") if overlay_form is not None else None
        _register_fields(writer, field_refs, resources)


def write_pdf(writer: PdfWriter) -> bytes:
    buffer = BytesIO()
    try:
        writer.write(buffer)
    except Exception as exc:
        raise PdfWriteError("Failed to serialize filled PDF") from exc
    return buffer.getvalue()


def _transfer_widget_annotations(
    overlay_page: PageObject,
    target_page: PageObject,
    writer: PdfWriter,
) -> list[IndirectObject]:
    source_annots = overlay_page.get("/Annots")
    if not source_annots:
        return []

    target_annots_obj = target_page.get("/Annots")
    target_annots = ArrayObject() if target_annots_obj is None else target_annots_obj.get_object()

    cloned_refs: list[IndirectObject] = []
    for annot_ref in source_annots.get_object():
        annot = annot_ref.get_object()
        if annot.get("/Subtype") != "/Widget":
            continue

        cloned = annot.clone(writer, ignore_fields=("/P",))
        cloned_ref = cloned.indirect_reference or writer._add_object(cloned)
        if target_page.indirect_reference is not None:
            cloned[NameObject("/P")] = target_page.indirect_reference
        target_annots.append(cloned_ref)
        cloned_refs.append(cloned_ref)

    target_page[NameObject("/Annots")] = target_annots
    return cloned_refs


def _register_fields(writer: PdfWriter, field_refs: ArrayObject, resources) -> None:
    root = writer._root_object
    if "/AcroForm" in root:
        acroform = root["/AcroForm"].get_object()
        fields_obj = acroform.get("/Fields")
        fields = ArrayObject() if fields_obj is None else fields_obj.get_object()
        fields.extend(field_refs)
        acroform[NameObject("/Fields")] = fields
    else:
        acroform = DictionaryObject({NameObject("/Fields"): field_refs})
        root[NameObject("/AcroForm")] = writer._add_object(acroform)

    if resources is not None and "/DR" not in acroform:
        cloned_resources = resources.get_object().clone(writer)
        acroform[NameObject("/DR")] = cloned_resources.indirect_reference or cloned_resources
    acroform[NameObject("/NeedAppearances")] = BooleanObject(True)
