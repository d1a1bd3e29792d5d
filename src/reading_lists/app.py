"""Minimal Textual host application for the add-to-list picker."""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Static

from reading_lists.modals import AddToReadingListModal
from reading_lists.models import AddOutcome
from reading_lists.workflow import AddPagesWorkflow

logger = logging.getLogger(__name__)


class ReadingListsApp(App[AddOutcome | None]):
    """Shows the picker for the workflow's pages and exits with the outcome."""

    TITLE = "Reading lists"

    def __init__(self, workflow: AddPagesWorkflow) -> None:
        super().__init__()
        self._workflow = workflow

    def compose(self) -> ComposeResult:
        yield Header()
        titles = "\n".join(f"  {page.display_text}" for page in self._workflow.pages)
        yield Static(f"Pages to save:\n{titles}", id="pages")
        yield Footer()

    def on_mount(self) -> None:
        self.push_screen(AddToReadingListModal(self._workflow), self._on_picker_closed)

    def _on_picker_closed(self, outcome: AddOutcome | None) -> None:
        logger.debug("Picker closed with %r", type(outcome).__name__)
        self.exit(outcome)


__all__ = [
    "ReadingListsApp",
]
