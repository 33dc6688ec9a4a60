"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Message rendering (plain text vs. highlighted code)
- Reveal display updates
- Error banner visibility
- Input history management
"""

from collections.abc import Callable

from rich.syntax import Syntax
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Static, TextArea

from ..session import ContentType, Message, MessageFilter, RevealState, Role

WELCOME_TEXT = (
    "Welcome to Parley!\n\n"
    "Start a conversation by typing below and pressing Ctrl+J."
)


def _matches(message: Message, kind: MessageFilter) -> bool:
    if kind is MessageFilter.ALL:
        return True
    if kind is MessageFilter.CODE:
        return message.content_type is ContentType.CODE
    return message.content_type is ContentType.TEXT


class MessageView(Vertical):
    """One rendered message. Clicking it copies the content."""

    def __init__(self, message: Message, shown: str, highlight_code: bool, **kwargs) -> None:
        role_class = "user-message" if message.role is Role.USER else "assistant-message"
        super().__init__(classes=f"chat-message {role_class}", **kwargs)
        self._message = message
        self._shown = shown
        self._highlight_code = highlight_code

    @property
    def message(self) -> Message:
        return self._message

    def compose(self):
        message = self._message
        prefix = "> You" if message.role is Role.USER else "< Assistant"
        timestamp = message.timestamp.astimezone().strftime("%H:%M:%S")
        header = f"{prefix} [{timestamp}]"
        if message.language:
            header += f" {message.language}"
        yield Static(Text(header), classes="message-header")
        yield Static(self._body(), classes="message-content")

    def on_mount(self) -> None:
        self.set_class(self._message.reveal_state is RevealState.REVEALING, "revealing")

    def _body(self) -> Text | Syntax:
        message = self._message
        if (
            message.content_type is ContentType.CODE
            and message.reveal_state is not RevealState.REVEALING
            and self._highlight_code
        ):
            return Syntax(message.content, message.language or "text", theme="monokai", word_wrap=True)
        return Text(self._shown)

    def _set_body(self, renderable: Text | Syntax) -> None:
        # Not composed yet when a reveal tick lands right after mount
        for body in self.query(".message-content").results(Static):
            body.update(renderable)

    def update_display(self, shown: str) -> None:
        """Show a partial reveal."""
        self._shown = shown
        self._set_body(Text(shown))

    def finish(self, message: Message) -> None:
        """Swap in the final message once its reveal is done."""
        self._message = message
        self._shown = message.content
        self.remove_class("revealing")
        self._set_body(self._body())

    def on_click(self, event: Click) -> None:
        """Copy message content to the clipboard when clicked."""
        event.stop()
        self.app.copy_to_clipboard(self._message.content)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable conversation with a type filter."""

    BORDER_TITLE = "Chat"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[str, MessageView] = {}
        self._filter = MessageFilter.ALL
        self._auto_scroll = True
        self._highlight_code = True

    @property
    def message_filter(self) -> MessageFilter:
        return self._filter

    def configure(self, auto_scroll: bool, highlight_code: bool) -> None:
        self._auto_scroll = auto_scroll
        self._highlight_code = highlight_code

    def load(
        self,
        messages: list[Message],
        shown: Callable[[Message], str],
        kind: MessageFilter | None = None,
    ) -> None:
        """Re-render the whole history."""
        if kind is not None:
            self._filter = kind
        self.remove_children()
        self._views.clear()
        visible = [m for m in messages if _matches(m, self._filter)]
        if not visible:
            self.mount(Static(WELCOME_TEXT, classes="welcome"))
        for message in visible:
            self._mount_view(message, shown(message))
        self._update_subtitle(len(visible), len(messages))
        self._scroll()

    def add_message(self, message: Message, shown: str) -> None:
        if not _matches(message, self._filter) or message.id in self._views:
            return
        for welcome in self.query(".welcome"):
            welcome.remove()
        self._mount_view(message, shown)
        self._update_subtitle(len(self._views), None)
        self._scroll()

    def update_reveal(self, message_id: str, shown: str) -> None:
        view = self._views.get(message_id)
        if view is not None:
            view.update_display(shown)
            self._scroll()

    def finish_reveal(self, message: Message) -> None:
        view = self._views.get(message.id)
        if view is not None:
            view.finish(message)

    def get_last_response(self) -> str | None:
        """Content of the last assistant message currently shown."""
        for view in reversed(list(self._views.values())):
            if view.message.role is Role.ASSISTANT:
                return view.message.content
        return None

    def _mount_view(self, message: Message, shown: str) -> None:
        view = MessageView(message, shown, self._highlight_code)
        self._views[message.id] = view
        self.mount(view)

    def _update_subtitle(self, shown: int, total: int | None) -> None:
        label = f"{shown} messages"
        if self._filter is not MessageFilter.ALL:
            label += f" | filter: {self._filter.value}"
            if total is not None:
                label += f" of {total}"
        self.border_subtitle = label

    def _scroll(self) -> None:
        if self._auto_scroll:
            self.scroll_end(animate=False)


class ErrorBanner(Static):
    """Single visible error, shown and hidden by the error reporter."""

    def show_error(self, text: str | None) -> None:
        if text:
            self.update(Text(f"! {text}"))
            self.add_class("-visible")
        else:
            self.update("")
            self.remove_class("-visible")


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self.has_class("-busy"):
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text
        if not value.strip():
            return
        stripped = value.strip()
        if not self._history or self._history[-1] != stripped:
            self._history.append(stripped)
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Block submissions while a request is in flight."""
        self.set_class(busy, "-busy")

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()
