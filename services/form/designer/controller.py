"""Pointer handling for the designer canvas: drop, drag, resize and hover."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from . import geometry
from .document import TemplateField, new_field
from .events import CanvasRect, PointerEvent
from .state import DesignerState

logger = logging.getLogger(__name__)


@dataclass
class _DragGesture:
    field_id: str
    offset_x: float
    offset_y: float


@dataclass
class _ResizeGesture:
    field_id: str
    handle: str
    start_x: float
    start_y: float
    start: geometry.Box


class CanvasController:
    """Turns pointer events on the canvas into document mutations.

    At most one gesture (drag or resize) is active at a time. Moves and
    releases only have an effect while a gesture is active, and every
    move writes straight into the document: there is no separate commit on
    release.
    """

    def __init__(self, state: DesignerState, canvas: Optional[CanvasRect] = None) -> None:
        self.state = state
        self.canvas = canvas or CanvasRect()
        self._drag: Optional[_DragGesture] = None
        self._resize: Optional[_ResizeGesture] = None
        self.hover_field_id: Optional[str] = None
        self.hover_handle: Optional[str] = None

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    @property
    def resizing(self) -> bool:
        return self._resize is not None

    @property
    def active_field_id(self) -> Optional[str]:
        if self._drag is not None:
            return self._drag.field_id
        if self._resize is not None:
            return self._resize.field_id
        return None

    def _local(self, item: TemplateField, event: PointerEvent) -> tuple[float, float]:
        return (
            event.client_x - self.canvas.left - item.style.left,
            event.client_y - self.canvas.top - item.style.top,
        )

    def drop(self, field_type: str, event: PointerEvent) -> TemplateField:
        """Create a field of ``field_type`` where a palette entry was dropped."""

        event.prevent_default()
        item = new_field(
            field_type,
            left=event.client_x - self.canvas.left,
            top=event.client_y - self.canvas.top,
        )
        self.state.add_field(item)
        self.state.select(item.id)
        logger.debug("Dropped %s field %s", field_type, item.id)
        return item

    def pointer_down(self, field_id: str, event: PointerEvent) -> Optional[str]:
        """Start a resize when the pointer is on a field's border, a drag otherwise.

        Returns the resize handle, or ``None`` for a drag.
        """

        item = self.state.require_field(field_id)
        self.pointer_up()
        local_x, local_y = self._local(item, event)
        handle = geometry.hit_test(local_x, local_y, item.style.width, item.style.height)
        if handle is not None:
            self._start_resize(item, handle, event)
        else:
            self._drag = _DragGesture(field_id=item.id, offset_x=local_x, offset_y=local_y)
            self.state.select(item.id)
        event.prevent_default()
        event.stop_propagation()
        return handle

    def handle_pointer_down(self, field_id: str, handle: str, event: PointerEvent) -> None:
        """Start a resize from one of the explicit handles around the selection."""

        if handle not in geometry.HANDLES:
            raise ValueError(f"Unknown resize handle: {handle!r}")
        event.prevent_default()
        event.stop_propagation()
        item = self.state.require_field(field_id)
        self.pointer_up()
        self._start_resize(item, handle, event)

    def _start_resize(self, item: TemplateField, handle: str, event: PointerEvent) -> None:
        style = item.style
        self._resize = _ResizeGesture(
            field_id=item.id,
            handle=handle,
            start_x=event.client_x,
            start_y=event.client_y,
            start=geometry.Box(style.left, style.top, style.width, style.height),
        )
        self.state.select(item.id)

    def pointer_move(self, event: PointerEvent) -> Optional[TemplateField]:
        if self._drag is not None:
            return self._move_drag(self._drag, event)
        if self._resize is not None:
            return self._move_resize(self._resize, event)
        return None

    def _move_drag(self, gesture: _DragGesture, event: PointerEvent) -> Optional[TemplateField]:
        item = self.state.find_field(gesture.field_id)
        if item is None:
            self.pointer_up()
            return None
        size = (item.style.width, item.style.height, self.canvas.width, self.canvas.height)
        left, top = geometry.clamp_position(
            event.client_x - self.canvas.left - gesture.offset_x,
            event.client_y - self.canvas.top - gesture.offset_y,
            *size,
        )
        enabled = self.state.snap_to_grid
        # Snapping can round past the far edge; clamp again so the field stays on the canvas.
        left, top = geometry.clamp_position(
            geometry.snap(left, enabled), geometry.snap(top, enabled), *size
        )
        return self.state.update_style(item.id, left=left, top=top)

    def _move_resize(self, gesture: _ResizeGesture, event: PointerEvent) -> Optional[TemplateField]:
        if self.state.find_field(gesture.field_id) is None:
            self.pointer_up()
            return None
        box = geometry.resize(
            gesture.handle,
            gesture.start,
            event.client_x - gesture.start_x,
            event.client_y - gesture.start_y,
        )
        enabled = self.state.snap_to_grid
        return self.state.update_style(
            gesture.field_id,
            left=geometry.snap(box.left, enabled),
            top=geometry.snap(box.top, enabled),
            width=geometry.snap(box.width, enabled),
            height=geometry.snap(box.height, enabled),
        )

    def pointer_up(self) -> None:
        self._drag = None
        self._resize = None

    def hover(self, field_id: str, event: PointerEvent) -> Optional[str]:
        """Return the cursor for the pointer over a field; ``None`` during a gesture."""

        if self._drag is not None or self._resize is not None:
            return None
        item = self.state.require_field(field_id)
        local_x, local_y = self._local(item, event)
        self.hover_field_id = item.id
        self.hover_handle = geometry.hit_test(local_x, local_y, item.style.width, item.style.height)
        return geometry.cursor_for(self.hover_handle)

    def leave(self) -> None:
        if self._drag is None and self._resize is None:
            self.hover_field_id = None
            self.hover_handle = None
