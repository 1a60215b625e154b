"""Property panel bound to the selected field."""
from __future__ import annotations

import re
from typing import Any, Callable, Dict, Optional

from .document import TemplateField
from .state import DesignerState

FONT_WEIGHTS = ("normal", "bold", "lighter")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Read the leading integer of ``value`` the way an HTML number input does."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


_TRUE_STRINGS = {"true", "1", "on", "yes"}
_FALSE_STRINGS = {"false", "0", "off", "no", ""}


def parse_bool(value: Any) -> Optional[bool]:
    """Read a checkbox value; strings such as ``"false"`` and ``"0"`` are False."""

    if isinstance(value, (bool, int)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


# Panel input name -> (target, attribute, parser). Parsers return None to skip.
PROPERTIES: Dict[str, tuple[str, str, Callable[[Any], Any]]] = {
    "label": ("field", "label", str),
    "placeholder": ("field", "placeholder", str),
    "required": ("field", "required", parse_bool),
    "width": ("style", "width", parse_int),
    "height": ("style", "height", parse_int),
    "fontSize": ("style", "font_size", parse_int),
    "fontWeight": ("style", "font_weight", str),
    "color": ("style", "color", str),
    "borderColor": ("style", "border_color", str),
    "backgroundColor": ("style", "background_color", str),
}


class PropertyPanel:
    """Edits write straight into the document; there is no draft to apply."""

    def __init__(self, state: DesignerState) -> None:
        self.state = state

    @property
    def field(self) -> Optional[TemplateField]:
        return self.state.selected_field

    def values(self) -> Optional[Dict[str, Any]]:
        item = self.field
        if item is None:
            return None
        style = item.style
        return {
            "label": item.label,
            "placeholder": item.placeholder or "",
            "required": bool(item.required),
            "width": style.width,
            "height": style.height,
            "fontSize": style.font_size or 14,
            "fontWeight": style.font_weight or "normal",
            "color": style.color or "#000000",
            "borderColor": style.border_color or "#d1d5db",
            "backgroundColor": style.background_color,
        }

    def change(self, name: str, value: Any) -> Optional[TemplateField]:
        """Apply one input change to the selected field.

        Returns the updated field, or ``None`` when nothing is selected or the
        value could not be parsed.
        """

        target, attribute, parser = PROPERTIES[name]
        item = self.field
        if item is None:
            return None
        parsed = parser(value)
        if parsed is None:
            return None
        if target == "style":
            return self.state.update_style(item.id, **{attribute: parsed})
        return self.state.update_field(item.id, **{attribute: parsed})

    def copy(self) -> bool:
        return self.state.copy_selected()

    def paste(self) -> Optional[TemplateField]:
        return self.state.paste()

    def delete(self) -> bool:
        item = self.field
        if item is None:
            return False
        return self.state.delete_field(item.id)

    def close(self) -> None:
        self.state.clear_selection()
