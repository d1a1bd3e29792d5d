"""Add-to-reading-list picker with the one-time onboarding panel."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from rich.markup import escape as escape_markup
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, ListItem, ListView, Static

from reading_lists.action_messages import (
    build_rejection_message,
    describe_outcome,
    pluralize_articles,
)
from reading_lists.modals.list_title import ReadingListTitleModal
from reading_lists.models import (
    STATE_ONBOARDING,
    AddOutcome,
    DisplayedLists,
    ReadingList,
    Rejected,
)
from reading_lists.workflow import AddPagesWorkflow

logger = logging.getLogger(__name__)

ONBOARDING_TEXT = (
    "Reading lists let you save articles to read later, even offline.\n"
    "Create as many lists as you like and file articles into any of them."
)


def format_list_row(reading_list: ReadingList) -> str:
    """Render one picker row as Textual markup."""
    count = pluralize_articles(reading_list.member_count)
    label = f"{escape_markup(reading_list.name)} [dim]({count})[/]"
    if reading_list.description:
        label += f"\n[dim]{escape_markup(reading_list.description)}[/]"
    return label


class AddToReadingListModal(ModalScreen[AddOutcome | None]):
    """Pick an existing list (or create one) and add the workflow's pages to it."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("n", "create_list", "New list"),
    ]

    CSS = """
    AddToReadingListModal {
        align: center middle;
    }

    #addrl-dialog {
        width: 50%;
        height: 60%;
        min-width: 40;
        min-height: 14;
        background: $surface;
        border: tall $accent;
        padding: 0 2;
    }

    #addrl-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    #addrl-onboarding {
        height: 1fr;
    }

    #addrl-onboarding-text {
        height: auto;
        margin-bottom: 1;
    }

    #addrl-lists {
        height: 1fr;
    }

    #addrl-list {
        height: 1fr;
        background: $panel;
        border: none;
    }

    #addrl-status {
        color: $warning;
    }

    #addrl-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #addrl-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(self, workflow: AddPagesWorkflow) -> None:
        super().__init__()
        self._workflow = workflow
        self._displayed = DisplayedLists()
        self._tasks: set[asyncio.Task[None]] = set()
        self._busy = False

    def compose(self) -> ComposeResult:
        count = len(self._workflow.pages)
        with Vertical(id="addrl-dialog"):
            yield Label(f"Add {pluralize_articles(count)} to a reading list", id="addrl-title")
            with Vertical(id="addrl-onboarding"):
                yield Static(ONBOARDING_TEXT, id="addrl-onboarding-text")
                yield Button("Got it", variant="primary", id="addrl-onboarding-ok")
            with Vertical(id="addrl-lists"):
                yield ListView(id="addrl-list")
            yield Label("", id="addrl-status")
            with Horizontal(id="addrl-buttons"):
                yield Button("Retry", variant="default", id="addrl-retry")
                yield Button("Create new list", variant="primary", id="addrl-create")
                yield Button("Cancel", variant="default", id="addrl-cancel")

    def on_mount(self) -> None:
        self.query_one("#addrl-onboarding").display = False
        self.query_one("#addrl-lists").display = False
        self.query_one("#addrl-retry").display = False
        self._track_task(self._load())

    def on_unmount(self) -> None:
        # Pending store calls are abandoned; committed writes stay committed
        for task in list(self._tasks):
            task.cancel()

    def _track_task(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in picker task: %s", exc, exc_info=exc)

    async def _load(self) -> None:
        self._show(await self._workflow.load_lists())

    def _show(self, displayed: DisplayedLists) -> None:
        self._displayed = displayed
        onboarding = displayed.state == STATE_ONBOARDING
        self.query_one("#addrl-onboarding").display = onboarding
        self.query_one("#addrl-lists").display = not onboarding
        self.query_one("#addrl-create", Button).disabled = (
            onboarding or displayed.error is not None
        )
        status = self.query_one("#addrl-status", Label)
        retry = self.query_one("#addrl-retry", Button)
        if displayed.error is not None:
            status.update(build_rejection_message(displayed.error))
            retry.display = True
        else:
            status.update("")
            retry.display = False
        self._refresh_list()
        if displayed.prompt_create and displayed.error is None:
            self.action_create_list()

    def _refresh_list(self) -> None:
        list_view = self.query_one("#addrl-list", ListView)
        list_view.clear()
        for rl in self._displayed.lists:
            list_view.append(ListItem(Label(format_list_row(rl))))
        if self._displayed.lists:
            list_view.index = 0

    def _finish(self, outcome: AddOutcome) -> None:
        message = describe_outcome(outcome, self._workflow.pages)
        severity = "warning" if isinstance(outcome, Rejected) else "information"
        self.notify(message, title="Reading lists", severity=severity)
        self.dismiss(outcome)

    def _start_add(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run one add at a time; later selections are ignored until it finishes."""
        if self._busy:
            coro.close()
            return
        self._busy = True
        self._track_task(coro)

    async def _add_to(self, reading_list: ReadingList) -> None:
        self._finish(await self._workflow.add_pages(reading_list))

    async def _create_and_add(self, name: str, description: str) -> None:
        self._finish(await self._workflow.create_list_and_add(name, description))

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_create_list(self) -> None:
        if self._busy or self._displayed.error is not None:
            return
        if self._displayed.state == STATE_ONBOARDING:
            return
        rejected = self._workflow.check_can_create()
        if rejected is not None:
            self._finish(rejected)
            return
        existing = [rl.name for rl in self._workflow.reading_lists]

        def _on_title(result: tuple[str, str] | None) -> None:
            if result is None:
                return
            name, description = result
            self._start_add(self._create_and_add(name, description))

        self.app.push_screen(ReadingListTitleModal(existing), _on_title)

    @on(Button.Pressed, "#addrl-onboarding-ok")
    def on_onboarding_ok_pressed(self) -> None:
        self._show(self._workflow.dismiss_onboarding())

    @on(Button.Pressed, "#addrl-create")
    def on_create_pressed(self) -> None:
        self.action_create_list()

    @on(Button.Pressed, "#addrl-retry")
    def on_retry_pressed(self) -> None:
        self._track_task(self._load())

    @on(Button.Pressed, "#addrl-cancel")
    def on_cancel_pressed(self) -> None:
        self.action_cancel()

    @on(ListView.Selected, "#addrl-list")
    def on_list_selected(self, event: ListView.Selected) -> None:
        idx = self.query_one("#addrl-list", ListView).index
        if idx is not None and 0 <= idx < len(self._displayed.lists):
            self._start_add(self._add_to(self._displayed.lists[idx]))
