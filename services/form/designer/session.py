"""The designer screen: one template being edited from mount until save."""
from __future__ import annotations

import logging
from typing import Any, BinaryIO, Callable, Dict, Optional

from .client import TemplateClient, TemplateClientError
from .controller import CanvasController
from .document import Template
from .events import CanvasRect, KeyEvent
from .pages import PageManager
from .properties import PropertyPanel
from .state import DesignerState

logger = logging.getLogger(__name__)

NAME_REQUIRED_MESSAGE = "テンプレート名を入力してください"
SAVED_MESSAGE = "保存しました"
SAVE_FAILED_MESSAGE = "保存に失敗しました"


def _log_alert(message: str) -> None:
    logger.warning("%s", message)


class DesignerSession:
    """Wires the canvas, page manager and property panel to one template.

    ``alert`` receives user-facing messages. A GUI passes a blocking dialog;
    the default only logs them.
    """

    def __init__(
        self,
        template_id: Any = None,
        client: Optional[TemplateClient] = None,
        canvas: Optional[CanvasRect] = None,
        alert: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.template_id = None if template_id == "new" else template_id
        self.client = client or TemplateClient()
        self.alert = alert or _log_alert
        self.state = DesignerState()
        self.canvas = CanvasController(self.state, canvas)
        self.pages = PageManager(self.state, self.alert)
        self.properties = PropertyPanel(self.state)

    @property
    def is_new(self) -> bool:
        return self.template_id is None

    @property
    def template(self) -> Template:
        return self.state.template

    def mount(self) -> None:
        """Load the template being edited; a failed load keeps the empty one."""

        if self.is_new:
            return
        try:
            data = self.client.fetch(self.template_id)
            template = Template.from_dict(data)
        except (TemplateClientError, AttributeError, KeyError, TypeError, ValueError):
            logger.exception("Loading template %s failed", self.template_id)
            return
        self.state.load(template)
        logger.info("Loaded template %s", self.template_id)

    def rename(self, name: str, description: Optional[str] = None) -> None:
        self.template.name = name
        if description is not None:
            self.template.description = description

    def set_snap_to_grid(self, enabled: bool) -> None:
        self.state.snap_to_grid = enabled

    def save(self) -> Optional[Dict[str, Any]]:
        if not self.template.name:
            self.alert(NAME_REQUIRED_MESSAGE)
            return None

        payload = self.template.to_dict()
        if self.template_id is not None:
            payload["id"] = self.template_id
        try:
            saved = self.client.save(payload)
        except TemplateClientError:
            logger.exception("Saving template %s failed", self.template_id or "(new)")
            self.alert(SAVE_FAILED_MESSAGE)
            return None

        if self.is_new:
            self.template_id = saved.get("id")
            self.template.id = self.template_id
        logger.info("Saved template %s", self.template_id)
        self.alert(SAVED_MESSAGE)
        return saved

    def upload_background(self, filename: str, fileobj: BinaryIO, content_type: str) -> Optional[str]:
        try:
            url = self.client.upload(filename, fileobj, content_type)
        except TemplateClientError:
            logger.exception("Uploading background %s failed", filename)
            return None
        self.pages.set_background(url)
        return url

    def key_down(self, event: KeyEvent) -> bool:
        """Handle the designer's global shortcuts. Returns True when one fired."""

        if event.command:
            key = event.key.lower()
            if key == "c" and self.state.selected_field is not None:
                event.prevent_default()
                self.state.copy_selected()
                return True
            if key == "v" and self.state.clipboard is not None:
                event.prevent_default()
                self.state.paste()
                return True
            if key == "s":
                event.prevent_default()
                self.save()
                return True
            return False

        selected = self.state.selected_field
        if event.key == "Delete" and selected is not None:
            self.state.delete_field(selected.id)
            return True
        return False
