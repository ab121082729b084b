"""Standard font resolution, text metrics, and colour parsing for PDF drawing."""

from __future__ import annotations

import re
from typing import NamedTuple

from reportlab.pdfbase.pdfmetrics import stringWidth

from formfill.coords.precision import normalize
from formfill.model.field import DEFAULT_COLOR, FontStyle, FontWeight, TextAlign

# (regular, bold, italic, bold italic) for each of the three standard families.
STANDARD_FONTS: dict[str, tuple[str, str, str, str]] = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}

_SERIF_HINTS = ("times", "georgia", "serif")
_MONO_HINTS = ("courier", "lucida console", "monospace")
_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


class Color(NamedTuple):
    red: float
    green: float
    blue: float


def standard_family(font_family: str | None) -> str:
    family = (font_family or "").lower()
    if any(hint in family for hint in _MONO_HINTS):
        return "courier"
    # "sans-serif" would otherwise match the serif hint.
    if "sans-serif" not in family and any(hint in family for hint in _SERIF_HINTS):
        return "times"
    return "helvetica"


def resolve_font(
    font_family: str | None,
    weight: FontWeight = FontWeight.NORMAL,
    style: FontStyle = FontStyle.NORMAL,
) -> str:
    """Pick one of the 12 standard font names; unknown families become Helvetica."""
    regular, bold, italic, bold_italic = STANDARD_FONTS[standard_family(font_family)]
    is_bold = weight == FontWeight.BOLD
    is_italic = style == FontStyle.ITALIC
    if is_bold and is_italic:
        return bold_italic
    if is_bold:
        return bold
    if is_italic:
        return italic
    return regular


def text_width(text: str, font_name: str, font_size: float) -> float:
    return stringWidth(text, font_name, font_size)


def text_anchor_x(box_left: float, box_width: float, width_of_text: float, align: TextAlign) -> float:
    """Left edge at which text of the given width starts for the alignment."""
    if align == TextAlign.CENTER:
        return normalize(box_left + (box_width - width_of_text) / 2.0)
    if align == TextAlign.RIGHT:
        return normalize(box_left + box_width - width_of_text)
    return normalize(box_left)


def parse_hex_color(value: str | None, default: str = DEFAULT_COLOR) -> Color:
    match = _HEX_COLOR.match((value or "").strip()) or _HEX_COLOR.match(default)
    digits = match.group(1) if match else "000000"
    return Color(
        int(digits[0:2], 16) / 255.0,
        int(digits[2:4], 16) / 255.0,
        int(digits[4:6], 16) / 255.0,
    )
