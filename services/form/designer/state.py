"""Editing state shared by the canvas, property panel and keyboard shortcuts."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

from .document import FieldStyle, Template, TemplateField, TemplatePage, generate_field_id

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (コピー)"
PASTE_OFFSET = 20

_FIELD_ATTRIBUTES = {"type", "label", "placeholder", "required", "validation", "formula", "options", "style"}
_STYLE_ATTRIBUTES = {item.name for item in fields(FieldStyle)}


@dataclass
class DesignerState:
    """The document being edited plus the current page, selection and clipboard.

    The selection is stored as a field id and resolved against the current
    page on every access, so every mutation path (drag, resize, property
    edits, paste, delete) is visible through ``selected_field`` without a
    second copy to keep in step.
    """

    template: Template = field(default_factory=Template)
    current_page_index: int = 0
    selected_field_id: Optional[str] = None
    clipboard: Optional[TemplateField] = None
    snap_to_grid: bool = True

    @property
    def current_page(self) -> TemplatePage:
        return self.template.pages[self.current_page_index]

    @property
    def selected_field(self) -> Optional[TemplateField]:
        if self.selected_field_id is None:
            return None
        return self.find_field(self.selected_field_id)

    def find_field(self, field_id: str) -> Optional[TemplateField]:
        for item in self.current_page.fields:
            if item.id == field_id:
                return item
        return None

    def require_field(self, field_id: str) -> TemplateField:
        item = self.find_field(field_id)
        if item is None:
            raise KeyError(f"No field {field_id!r} on page {self.current_page_index + 1}")
        return item

    def load(self, template: Template) -> None:
        self.template = template
        self.current_page_index = 0
        self.selected_field_id = None

    def go_to_page(self, index: int) -> None:
        index = max(0, min(index, len(self.template.pages) - 1))
        if index != self.current_page_index:
            self.selected_field_id = None
        self.current_page_index = index

    def select(self, field_id: str) -> None:
        self.require_field(field_id)
        self.selected_field_id = field_id

    def clear_selection(self) -> None:
        self.selected_field_id = None

    def add_field(self, item: TemplateField) -> TemplateField:
        self.current_page.fields.append(item)
        return item

    def update_field(self, field_id: str, **changes: Any) -> TemplateField:
        """Merge attribute changes into a field of the current page."""

        unknown = set(changes) - _FIELD_ATTRIBUTES
        if unknown:
            raise ValueError(f"Unknown field attributes: {sorted(unknown)}")
        item = self.require_field(field_id)
        for name, value in changes.items():
            setattr(item, name, value)
        return item

    def update_style(self, field_id: str, **changes: Any) -> TemplateField:
        """Merge style changes (snake_case names) into a field of the current page."""

        unknown = set(changes) - _STYLE_ATTRIBUTES
        if unknown:
            raise ValueError(f"Unknown style attributes: {sorted(unknown)}")
        item = self.require_field(field_id)
        item.style = replace(item.style, **changes)
        return item

    def delete_field(self, field_id: str) -> bool:
        page = self.current_page
        remaining = [item for item in page.fields if item.id != field_id]
        if len(remaining) == len(page.fields):
            return False
        page.fields = remaining
        if self.selected_field_id == field_id:
            self.selected_field_id = None
        return True

    def copy_selected(self) -> bool:
        selected = self.selected_field
        if selected is None:
            return False
        self.clipboard = copy.deepcopy(selected)
        logger.debug("Copied field %s", selected.id)
        return True

    def paste(self) -> Optional[TemplateField]:
        """Append a duplicate of the clipboard field and select it.

        Every paste is offset from the copied field, not from the previous
        paste, so repeated pastes stack on the same spot.
        """

        source = self.clipboard
        if source is None:
            return None
        identifier = generate_field_id()
        duplicate = replace(
            copy.deepcopy(source),
            id=identifier,
            field_id=identifier,
            label=f"{source.label}{COPY_SUFFIX}",
            style=replace(
                source.style,
                left=source.style.left + PASTE_OFFSET,
                top=source.style.top + PASTE_OFFSET,
            ),
        )
        self.add_field(duplicate)
        self.selected_field_id = duplicate.id
        return duplicate
