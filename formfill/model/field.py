"""Form field model definitions.

Fields are stored with logical coordinates: unscaled page points, origin at
the page's top-left corner, Y growing downward. Each field type is its own
dataclass so renderers can match on the concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass, fields as dataclass_fields
from enum import Enum
from typing import Any, Union
import uuid


class FieldRecordError(ValueError):
    """Raised when a persisted field record cannot be converted."""


class FieldType(str, Enum):
    TEXT = "TEXT"
    DATE = "DATE"
    NUMBER = "NUMBER"
    EMAIL = "EMAIL"
    ICON = "ICON"
    SIGNATURE = "SIGNATURE"
    IMAGE = "IMAGE"
    FILLABLE = "FILLABLE"


TEXT_FIELD_TYPES = frozenset({FieldType.TEXT, FieldType.DATE, FieldType.NUMBER, FieldType.EMAIL})
IMAGE_FIELD_TYPES = frozenset({FieldType.SIGNATURE, FieldType.IMAGE})


class IconVariant(str, Enum):
    CHECK = "CHECK"
    CROSS = "CROSS"
    CIRCLE = "CIRCLE"
    CIRCLE_FILLED = "CIRCLE_FILLED"
    CIRCLE_CHECK = "CIRCLE_CHECK"
    CIRCLE_CROSS = "CIRCLE_CROSS"
    SQUARE = "SQUARE"
    SQUARE_FILLED = "SQUARE_FILLED"
    SQUARE_CHECK = "SQUARE_CHECK"
    STAR = "STAR"
    STAR_FILLED = "STAR_FILLED"
    HEART = "HEART"
    HEART_FILLED = "HEART_FILLED"
    ARROW_RIGHT = "ARROW_RIGHT"
    ARROW_LEFT = "ARROW_LEFT"
    ARROW_UP = "ARROW_UP"
    ARROW_DOWN = "ARROW_DOWN"
    THUMBS_UP = "THUMBS_UP"
    THUMBS_DOWN = "THUMBS_DOWN"
    FLAG = "FLAG"
    PIN = "PIN"
    BOOKMARK = "BOOKMARK"
    INFO = "INFO"
    WARNING = "WARNING"
    MINUS = "MINUS"
    PLUS = "PLUS"


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class FontStyle(str, Enum):
    NORMAL = "normal"
    ITALIC = "italic"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_COLOR = "#000000"

# width, height, font size
FIELD_DEFAULTS: dict[FieldType, tuple[float, float, float]] = {
    FieldType.TEXT: (250.0, 35.0, 14.0),
    FieldType.EMAIL: (250.0, 35.0, 14.0),
    FieldType.NUMBER: (120.0, 35.0, 14.0),
    FieldType.DATE: (150.0, 35.0, 14.0),
    FieldType.ICON: (30.0, 30.0, 12.0),
    FieldType.SIGNATURE: (300.0, 80.0, 12.0),
    FieldType.IMAGE: (200.0, 150.0, 12.0),
    FieldType.FILLABLE: (200.0, 30.0, 12.0),
}

_TRUTHY = {"true", "1", "yes", "on", "checked", "x"}


@dataclass(slots=True, kw_only=True)
class BaseField:
    id: str
    slug: str
    label: str
    field_type: FieldType
    page_number: int
    x: float
    y: float
    width: float
    height: float
    z_index: int = 0
    is_visible: bool = True

    def __post_init__(self) -> None:
        _coerce_base(self)

    @property
    def font_metric(self) -> float:
        """Font size fed to the position resolver; non-text fields use the type default."""
        return FIELD_DEFAULTS[self.field_type][2]


@dataclass(slots=True, kw_only=True)
class TextField(BaseField):
    field_type: FieldType = FieldType.TEXT
    font_size: float = 14.0
    font_family: str = DEFAULT_FONT_FAMILY
    font_weight: FontWeight = FontWeight.NORMAL
    font_style: FontStyle = FontStyle.NORMAL
    text_align: TextAlign = TextAlign.LEFT
    text_color: str = DEFAULT_COLOR

    def __post_init__(self) -> None:
        _coerce_base(self)
        self.font_weight = _enum_member(FontWeight, self.font_weight)
        self.font_style = _enum_member(FontStyle, self.font_style)
        self.text_align = _enum_member(TextAlign, self.text_align)

    @property
    def font_metric(self) -> float:
        return self.font_size


@dataclass(slots=True, kw_only=True)
class IconField(BaseField):
    field_type: FieldType = FieldType.ICON
    icon_variant: IconVariant | str = IconVariant.CHECK
    icon_color: str = DEFAULT_COLOR
    default_visible: bool = False

    def __post_init__(self) -> None:
        _coerce_base(self)
        self.default_visible = parse_bool_value(self.default_visible)


@dataclass(slots=True, kw_only=True)
class ImageField(BaseField):
    field_type: FieldType = FieldType.SIGNATURE

    def __post_init__(self) -> None:
        _coerce_base(self)


@dataclass(slots=True, kw_only=True)
class FillableField(BaseField):
    field_type: FieldType = FieldType.FILLABLE
    font_size: float = 12.0
    font_family: str = DEFAULT_FONT_FAMILY
    text_color: str = DEFAULT_COLOR
    placeholder: str = ""
    border_color: str | None = DEFAULT_COLOR
    border_width: float = 1.0

    def __post_init__(self) -> None:
        _coerce_base(self)

    @property
    def font_metric(self) -> float:
        return self.font_size


Field = Union[TextField, IconField, ImageField, FillableField]


def parse_bool_value(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUTHY


def _enum_member(enum_cls: type[Enum], value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    # Field types are upper case, styles lower case.
    return enum_cls(text.upper() if enum_cls is FieldType else text.lower())


def _coerce_base(field: BaseField) -> None:
    """Normalize loosely typed constructor input; raises ValueError on bad values."""
    field.field_type = _enum_member(FieldType, field.field_type)
    field.page_number = int(field.page_number)
    field.x = float(field.x)
    field.y = float(field.y)
    field.width = float(field.width)
    field.height = float(field.height)
    field.z_index = int(field.z_index)
    field.is_visible = parse_bool_value(field.is_visible)
    for attr in ("font_size", "border_width"):
        if hasattr(field, attr):
            setattr(field, attr, float(getattr(field, attr)))


def new_field(
    field_type: FieldType,
    page_number: int,
    x: float,
    y: float,
    slug: str,
    label: str | None = None,
) -> Field:
    """Create a field with the type's default dimensions at a logical position."""
    width, height, font_size = FIELD_DEFAULTS[field_type]
    common: dict[str, Any] = {
        "id": uuid.uuid4().hex,
        "slug": slug,
        "label": label or slug,
        "field_type": field_type,
        "page_number": page_number,
        "x": x,
        "y": y,
        "width": width,
        "height": height,
    }
    if field_type in TEXT_FIELD_TYPES:
        return TextField(font_size=font_size, **common)
    if field_type is FieldType.ICON:
        return IconField(**common)
    if field_type in IMAGE_FIELD_TYPES:
        return ImageField(**common)
    return FillableField(font_size=font_size, **common)


# Persisted records use the editor's camelCase keys.
_RECORD_KEYS = {
    "id": "id",
    "slug": "slug",
    "label": "label",
    "page_number": "pageNumber",
    "x": "xCoord",
    "y": "yCoord",
    "width": "width",
    "height": "height",
    "z_index": "zIndex",
    "is_visible": "isVisible",
    "font_size": "fontSize",
    "font_family": "fontFamily",
    "font_weight": "fontWeight",
    "font_style": "fontStyle",
    "text_align": "textAlign",
    "text_color": "textColor",
    "icon_variant": "iconVariant",
    "icon_color": "iconColor",
    "default_visible": "defaultVisible",
    "placeholder": "placeholder",
    "border_color": "borderColor",
    "border_width": "borderWidth",
}

_ENUM_ATTRS = {
    "font_weight": FontWeight,
    "font_style": FontStyle,
    "text_align": TextAlign,
}


def _field_class(field_type: FieldType) -> type[BaseField]:
    if field_type in TEXT_FIELD_TYPES:
        return TextField
    if field_type is FieldType.ICON:
        return IconField
    if field_type in IMAGE_FIELD_TYPES:
        return ImageField
    return FillableField


def field_from_record(record: dict[str, Any]) -> Field:
    """Build a field from a persisted record, filling unset styles with defaults."""
    raw_type = record.get("inputType")
    try:
        field_type = FieldType(str(raw_type).upper())
    except ValueError as exc:
        raise FieldRecordError(f"Unknown input type: {raw_type!r}") from exc

    cls = _field_class(field_type)
    allowed = {item.name for item in dataclass_fields(cls)}
    kwargs: dict[str, Any] = {"field_type": field_type}
    for attr, key in _RECORD_KEYS.items():
        if attr not in allowed:
            continue
        value = record.get(key)
        if value is None:
            continue
        kwargs[attr] = value

    for attr, enum_cls in _ENUM_ATTRS.items():
        if attr in kwargs:
            try:
                kwargs[attr] = enum_cls(str(kwargs[attr]).lower())
            except ValueError:
                del kwargs[attr]
    if "icon_variant" in kwargs:
        variant = str(kwargs["icon_variant"]).upper()
        kwargs["icon_variant"] = IconVariant(variant) if variant in IconVariant.__members__ else variant
    if "default_visible" in kwargs:
        kwargs["default_visible"] = parse_bool_value(kwargs["default_visible"])

    kwargs.setdefault("id", uuid.uuid4().hex)
    kwargs.setdefault("label", record.get("slug", ""))
    try:
        return cls(**kwargs)  # type: ignore[return-value]
    except TypeError as exc:
        raise FieldRecordError(f"Incomplete field record: {record.get('slug', '?')}") from exc
    except ValueError as exc:
        raise FieldRecordError(f"Invalid value in field record {record.get('slug', '?')}: {exc}") from exc


def field_to_record(field: Field) -> dict[str, Any]:
    record: dict[str, Any] = {"inputType": field.field_type.value}
    for item in dataclass_fields(field):
        key = _RECORD_KEYS.get(item.name)
        if key is None:
            continue
        value = getattr(field, item.name)
        record[key] = value.value if isinstance(value, Enum) else value
    return record
