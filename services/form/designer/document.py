"""Serializable document model edited by the template designer.

A template is a tree of pages and fields. Each field carries a style
record with its position, size, font and colors. The wire format uses the
camelCase keys of the form service API, so ``Template.to_dict()`` can be
posted as-is and ``Template.from_dict()`` accepts API responses (extra keys
such as ``createdAt`` are ignored).
"""
from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

TEXT = "text"
CHECKBOX = "checkbox"
SELECT = "select"
TEXTAREA = "textarea"
DATE = "date"
NUMBER = "number"
CALCULATION = "calculation"
RADIO = "radio"

FIELD_TYPES = [
    (TEXT, "テキスト"),
    (CHECKBOX, "チェックボックス"),
    (SELECT, "選択"),
    (TEXTAREA, "テキストエリア"),
    (DATE, "日付"),
    (NUMBER, "数値"),
    (CALCULATION, "計算"),
    (RADIO, "ラジオボタン"),
]
FIELD_TYPE_LABELS = dict(FIELD_TYPES)

DEFAULT_WIDTH = 200
DEFAULT_HEIGHT = 40
DEFAULT_FONT_SIZE = 14
DEFAULT_Z_INDEX = 1000

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_field_id() -> str:
    """Return a new ``field_<epoch ms>_<random>`` identifier."""

    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"field_{int(time.time() * 1000)}_{suffix}"


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class FieldStyle:
    left: float
    top: float
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    font_size: int = DEFAULT_FONT_SIZE
    background_color: str = "transparent"
    color: str = "#000000"
    z_index: int = DEFAULT_Z_INDEX
    border_color: Optional[str] = None
    font_weight: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "left": self.left,
                "top": self.top,
                "width": self.width,
                "height": self.height,
                "fontSize": self.font_size,
                "backgroundColor": self.background_color,
                "color": self.color,
                "zIndex": self.z_index,
                "borderColor": self.border_color,
                "fontWeight": self.font_weight,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldStyle":
        return cls(
            left=data.get("left", 0),
            top=data.get("top", 0),
            width=data.get("width", DEFAULT_WIDTH),
            height=data.get("height", DEFAULT_HEIGHT),
            font_size=data.get("fontSize", DEFAULT_FONT_SIZE),
            background_color=data.get("backgroundColor", "transparent"),
            color=data.get("color", "#000000"),
            z_index=data.get("zIndex", DEFAULT_Z_INDEX),
            border_color=data.get("borderColor"),
            font_weight=data.get("fontWeight"),
        )


@dataclass
class TemplateField:
    id: str
    field_id: str
    type: str
    label: str
    style: FieldStyle
    placeholder: Optional[str] = None
    required: bool = False
    validation: Optional[str] = None
    formula: Optional[str] = None
    options: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "fieldId": self.field_id,
                "type": self.type,
                "label": self.label,
                "placeholder": self.placeholder,
                "required": self.required,
                "validation": self.validation,
                "formula": self.formula,
                "options": list(self.options) if self.options is not None else None,
                "style": self.style.to_dict(),
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateField":
        field_id = data.get("fieldId") or data.get("id")
        options = data.get("options")
        return cls(
            id=data.get("id") or field_id,
            field_id=field_id,
            type=data["type"],
            label=data.get("label", ""),
            style=FieldStyle.from_dict(data.get("style") or {}),
            placeholder=data.get("placeholder"),
            required=bool(data.get("required", False)),
            validation=data.get("validation"),
            formula=data.get("formula"),
            options=list(options) if options is not None else None,
        )


@dataclass
class TemplatePage:
    page_number: int
    fields: List[TemplateField] = field(default_factory=list)
    background_image: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "pageNumber": self.page_number,
                "backgroundImage": self.background_image,
                "fields": [item.to_dict() for item in self.fields],
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplatePage":
        return cls(
            page_number=data.get("pageNumber", 1),
            fields=[TemplateField.from_dict(item) for item in data.get("fields", [])],
            background_image=data.get("backgroundImage") or None,
        )


@dataclass
class Template:
    name: str = ""
    description: Optional[str] = ""
    pages: List[TemplatePage] = field(default_factory=lambda: [TemplatePage(page_number=1)])
    id: Optional[Union[int, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "name": self.name,
                "description": self.description,
                "pages": [page.to_dict() for page in self.pages],
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Template":
        if not isinstance(data, dict):
            raise ValueError(f"Template data must be an object, not {type(data).__name__}")
        pages = [TemplatePage.from_dict(item) for item in data.get("pages") or []]
        return cls(
            name=data.get("name", ""),
            description=data.get("description"),
            pages=pages or [TemplatePage(page_number=1)],
            id=data.get("id"),
        )


def new_field(field_type: str, left: float, top: float) -> TemplateField:
    """Build the field created by dropping a palette entry at ``(left, top)``."""

    try:
        type_label = FIELD_TYPE_LABELS[field_type]
    except KeyError:
        raise ValueError(f"Unknown field type: {field_type!r}") from None

    identifier = generate_field_id()
    return TemplateField(
        id=identifier,
        field_id=identifier,
        type=field_type,
        label=f"新しい{type_label}",
        style=FieldStyle(left=left, top=top),
    )
