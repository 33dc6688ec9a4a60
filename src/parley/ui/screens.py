"""Modal screens for the TUI.

This module hides the design decisions about:
- Confirmation dialog appearance (CSS, layout)
- How file paths for export/import are requested

To change how confirmations look, modify only this file.
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

DIALOG_CSS = """
    {name} {{
        align: center middle;
        background: $background 70%;
    }}

    .dialog {{
        width: 64;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }}

    .dialog-title {{
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }}

    .dialog-prompt {{
        width: 100%;
        text-align: center;
        padding: 1 2;
        margin-bottom: 1;
    }}

    .dialog-buttons {{
        width: 100%;
        height: 3;
        align: center middle;
    }}

    .dialog-buttons Button {{
        margin: 0 1;
        min-width: 10;
    }}
"""


class ConfirmationScreen(ModalScreen[bool]):
    """Yes/no dialog. Dismisses with True only on an explicit yes."""

    CSS = DIALOG_CSS.format(name="ConfirmationScreen")

    BINDINGS = [
        Binding("y", "confirm_yes", "Yes", show=False),
        Binding("n", "confirm_no", "No", show=False),
        Binding("escape", "confirm_no", "Cancel", show=False),
    ]

    def __init__(self, prompt: str, title: str = "Confirmation Required") -> None:
        super().__init__()
        self._prompt = prompt
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static(self._title, classes="dialog-title")
            yield Static(self._prompt, classes="dialog-prompt")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Yes", id="btn-yes", variant="error")
                yield Button("No", id="btn-no", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm_yes(self) -> None:
        self.dismiss(True)

    def action_confirm_no(self) -> None:
        self.dismiss(False)


class PathPromptScreen(ModalScreen[str | None]):
    """Asks for a file path. Dismisses with None when cancelled."""

    CSS = DIALOG_CSS.format(name="PathPromptScreen")

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, title: str, default: str = "") -> None:
        super().__init__()
        self._title = title
        self._default = default

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static(self._title, classes="dialog-title")
            yield Input(value=self._default, placeholder="Path", id="path-input")
            with Horizontal(classes="dialog-buttons"):
                yield Button("OK", id="btn-ok", variant="success")
                yield Button("Cancel", id="btn-cancel", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#path-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._accept(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-ok":
            self._accept(self.query_one("#path-input", Input).value)
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _accept(self, value: str) -> None:
        self.dismiss(value.strip() or None)
