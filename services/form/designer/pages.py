"""Adding, removing and navigating the pages of a template."""
from __future__ import annotations

import logging
from typing import Callable

from .document import TemplatePage
from .state import DesignerState

logger = logging.getLogger(__name__)

LAST_PAGE_MESSAGE = "最後のページは削除できません"


class PageManager:
    def __init__(self, state: DesignerState, alert: Callable[[str], None]) -> None:
        self.state = state
        self.alert = alert

    @property
    def count(self) -> int:
        return len(self.state.template.pages)

    @property
    def index(self) -> int:
        return self.state.current_page_index

    def label(self) -> str:
        return f"ページ {self.index + 1} / {self.count}"

    def add_page(self) -> TemplatePage:
        page = TemplatePage(page_number=self.count + 1)
        self.state.template.pages.append(page)
        self.state.go_to_page(self.count - 1)
        return page

    def delete_page(self) -> bool:
        """Remove the current page; the last remaining page is kept.

        Page numbers of the remaining pages are left as they are.
        """

        pages = self.state.template.pages
        if len(pages) <= 1:
            self.alert(LAST_PAGE_MESSAGE)
            return False
        index = self.index
        del pages[index]
        self.state.clear_selection()
        self.state.current_page_index = max(0, index - 1)
        logger.debug("Deleted page at index %s", index)
        return True

    def go_to(self, index: int) -> None:
        self.state.go_to_page(index)

    def previous(self) -> None:
        self.state.go_to_page(self.index - 1)

    def next(self) -> None:
        self.state.go_to_page(self.index + 1)

    def set_background(self, url: str) -> None:
        self.state.current_page.background_image = url
