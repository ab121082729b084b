"""Import existing AcroForm widgets from a PDF as editor fields."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
import re
import uuid

from pypdf import PdfReader

from formfill.coords.precision import canvas_to_pdf_y
from formfill.model.field import Field, FieldType, FillableField, IconField, IconVariant

_DA_FONT_SIZE = re.compile(r"([\d.]+)\s+Tf")


class PdfImportError(RuntimeError):
    """Raised when existing form fields cannot be imported."""


def _font_size(appearance: object, default: float = 12.0) -> float:
    match = _DA_FONT_SIZE.search(str(appearance or ""))
    if match is None:
        return default
    size = float(match.group(1))
    # A zero size in /DA means auto-size.
    return size if size > 0 else default


def import_pdf_fields(source: str | Path | bytes) -> list[Field]:
    """Read text and checkbox widgets and return them in logical coordinates.

    Text widgets become FILLABLE fields; checkboxes become CHECK icon fields
    whose default visibility follows the widget's checked state.
    """
    imported: list[Field] = []

    try:
        reader = PdfReader(BytesIO(source) if isinstance(source, bytes) else str(source))
        for page_index, page in enumerate(reader.pages):
            page_bottom = float(page.mediabox.bottom)
            page_height = float(page.mediabox.height)
            for annot_ref in page.get("/Annots") or []:
                annot = annot_ref.get_object()
                if annot.get("/Subtype") != "/Widget":
                    continue

                parent = annot.get("/Parent")
                parent_obj = parent.get_object() if parent is not None else None

                def inherited(key: str):
                    value = annot.get(key)
                    if value is None and parent_obj is not None:
                        value = parent_obj.get(key)
                    return value

                field_type = inherited("/FT")
                rect = annot.get("/Rect")
                if field_type is None or rect is None:
                    continue

                llx, lly, urx, ury = (float(value) for value in rect)
                width = max(0.0, abs(urx - llx))
                height = max(0.0, abs(ury - lly))
                left = min(llx, urx)
                bottom = min(lly, ury) - page_bottom
                slug = str(inherited("/T") or f"field_{len(imported) + 1}")
                common = {
                    "id": uuid.uuid4().hex,
                    "slug": slug,
                    "label": str(inherited("/TU") or slug),
                    "page_number": page_index + 1,
                    "x": left,
                    "y": canvas_to_pdf_y(bottom, height, page_height),
                    "width": width,
                    "height": height,
                }

                if field_type == "/Tx":
                    imported.append(
                        FillableField(
                            field_type=FieldType.FILLABLE,
                            font_size=_font_size(inherited("/DA")),
                            placeholder=str(inherited("/TU") or ""),
                            **common,
                        )
                    )
                elif field_type == "/Btn":
                    value = str(inherited("/V") or "")
                    appearance = str(annot.get("/AS") or "")
                    checked = value not in {"", "/Off", "Off"} or appearance not in {"", "/Off", "Off"}
                    imported.append(
                        IconField(
                            field_type=FieldType.ICON,
                            icon_variant=IconVariant.CHECK,
                            default_visible=checked,
                            **common,
                        )
                    )
    except Exception as exc:
        raise PdfImportError(f"Failed to import form fields from: {source if not isinstance(source, bytes) else '<bytes>'}") from exc

    return imported
