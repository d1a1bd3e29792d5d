"""Name/description dialog used when creating a reading list."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label


class ReadingListTitleModal(ModalScreen[tuple[str, str] | None]):
    """Modal dialog asking for a new list's name and optional description."""

    BINDINGS = [
        Binding("ctrl+s", "save", "Save"),
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    ReadingListTitleModal {
        align: center middle;
    }

    #rltitle-dialog {
        width: 50%;
        height: auto;
        min-width: 40;
        background: $surface;
        border: tall $accent;
        padding: 0 2;
    }

    #rltitle-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    #rltitle-dialog Label {
        color: $text-muted;
    }

    #rltitle-name,
    #rltitle-desc {
        width: 100%;
    }

    #rltitle-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #rltitle-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(
        self,
        existing_names: list[str],
        name: str = "",
        description: str = "",
    ) -> None:
        super().__init__()
        self._existing_names = set(existing_names)
        self._name = name
        self._description = description

    def compose(self) -> ComposeResult:
        with Vertical(id="rltitle-dialog"):
            yield Label("Create a new list", id="rltitle-title")
            yield Label("Name")
            yield Input(value=self._name, placeholder="e.g., Travel", id="rltitle-name")
            yield Label("Description")
            yield Input(
                value=self._description,
                placeholder="Optional description",
                id="rltitle-desc",
            )
            with Horizontal(id="rltitle-buttons"):
                yield Button("Cancel", variant="default", id="rltitle-cancel")
                yield Button("OK", variant="primary", id="rltitle-ok")

    def on_mount(self) -> None:
        self.query_one("#rltitle-name", Input).focus()

    def action_save(self) -> None:
        name = self.query_one("#rltitle-name", Input).value.strip()
        if not name:
            self.notify("Name cannot be empty", title="Reading lists", severity="warning")
            return
        if name in self._existing_names:
            self.notify(
                f"A list named '{name}' already exists",
                title="Reading lists",
                severity="warning",
            )
            return
        description = self.query_one("#rltitle-desc", Input).value.strip()
        self.dismiss((name, description))

    def action_cancel(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#rltitle-ok")
    def on_ok_pressed(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#rltitle-cancel")
    def on_cancel_pressed(self) -> None:
        self.action_cancel()

    @on(Input.Submitted)
    def on_input_submitted(self) -> None:
        self.action_save()
