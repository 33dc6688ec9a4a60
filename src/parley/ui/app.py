"""Main Textual TUI application.

Orchestrates the UI components on top of a SessionController. Widgets never
touch the store; they are updated from session events.
"""

import asyncio
import logging
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..config import APP_TITLE, AppConfig, find_model
from ..session import (
    AsyncioScheduler,
    MessageFilter,
    RevealState,
    SessionController,
    SessionEvent,
    SessionEventType,
    SessionState,
)
from .screens import ConfirmationScreen, PathPromptScreen
from .styles import APP_CSS
from .themes import CATPPUCCIN_LATTE, CATPPUCCIN_MOCHA, theme_for
from .widgets import ChatHistoryWidget, ChatInputBar, ErrorBanner

logger = logging.getLogger(__name__)

FILTER_CYCLE = [MessageFilter.ALL, MessageFilter.CODE, MessageFilter.TEXT]


class ParleyApp(App):
    """Textual TUI for a single chat session."""

    CSS = APP_CSS
    TITLE = APP_TITLE

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+l", "clear_chat", "Clear"),
        Binding("ctrl+r", "regenerate", "Regenerate"),
        Binding("ctrl+s", "export_history", "Export"),
        Binding("ctrl+o", "import_history", "Import"),
        Binding("ctrl+f", "cycle_filter", "Filter", priority=True),
        Binding("ctrl+t", "toggle_theme", "Theme"),
        Binding("ctrl+y", "copy_last_response", "Copy Response", priority=True),
        Binding("escape", "skip_reveal", "Skip"),
    ]

    def __init__(self, controller: SessionController, has_credential: bool = True) -> None:
        super().__init__()
        self._controller = controller
        self._has_credential = has_credential
        self._unsubscribe = None

    @property
    def controller(self) -> SessionController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield ErrorBanner(id="error-banner")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(CATPPUCCIN_MOCHA)
        self.register_theme(CATPPUCCIN_LATTE)
        self._apply_settings()

        self._unsubscribe = self._controller.subscribe(self._on_session_event)
        self._reload()
        self.query_one("#error-banner", ErrorBanner).show_error(self._controller.error)

        if not self._has_credential:
            self.notify(
                "OPENROUTER_API_KEY not set, requests will fail",
                severity="warning",
                timeout=5,
            )
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Stop listening; timers are stopped by run_textual_tui."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -- session events ----------------------------------------------------

    def _on_session_event(self, event: SessionEvent) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        kind = event.type

        if kind is SessionEventType.MESSAGE_APPENDED and event.message is not None:
            chat.add_message(event.message, self._controller.display_text(event.message))
        elif kind is SessionEventType.REVEAL_PROGRESS and event.message is not None:
            chat.update_reveal(event.message.id, event.text or "")
        elif kind is SessionEventType.REVEAL_COMPLETE and event.message is not None:
            chat.finish_reveal(event.message)
        elif kind in (SessionEventType.MESSAGES_REMOVED, SessionEventType.SESSION_RESET):
            self._reload()
        elif kind is SessionEventType.ERROR_CHANGED:
            self.query_one("#error-banner", ErrorBanner).show_error(event.text)
        elif kind is SessionEventType.STATE_CHANGED:
            busy = event.state is SessionState.SENDING
            self.query_one("#chat-input-bar", ChatInputBar).set_busy(busy)
            self._update_subtitle(busy)
        elif kind is SessionEventType.SETTINGS_CHANGED:
            self._apply_settings()
            self._reload()

    def _reload(self) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.load(list(self._controller.messages), self._controller.display_text)

    def _apply_settings(self) -> None:
        settings = self._controller.settings
        self.theme = theme_for(settings.dark_mode)
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.configure(settings.auto_scroll, settings.code_highlighting)
        self._update_subtitle(self._controller.in_flight)

    def _update_subtitle(self, busy: bool) -> None:
        settings = self._controller.settings
        model = find_model(settings.model)
        name = model.name if model else settings.model
        status = " | thinking..." if busy else ""
        self.sub_title = f"{name} | temp {settings.temperature:g}{status}"

    # -- input -------------------------------------------------------------

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        self._controller.input_buffer = event.value
        self._send()

    @work(exclusive=False, group="request")
    async def _send(self) -> None:
        await self._controller.send()

    @work(exclusive=False, group="request")
    async def _regenerate(self) -> None:
        await self._controller.regenerate_last()

    # -- actions -----------------------------------------------------------

    def action_regenerate(self) -> None:
        """Redo the last exchange."""
        if self._controller.in_flight:
            self.notify("A request is already in progress", severity="warning", timeout=2)
            return
        self._regenerate()

    def action_clear_chat(self) -> None:
        """Clear the conversation after confirmation."""

        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._controller.clear()
                self.notify("Chat cleared", timeout=2)

        self.push_screen(
            ConfirmationScreen("Are you sure you want to clear all messages? This cannot be undone."),
            on_confirm,
        )

    def action_export_history(self) -> None:
        """Export messages and settings to a JSON file."""

        def on_path(value: str | None) -> None:
            if value is None:
                return
            try:
                path = self._controller.export_snapshot(value)
            except OSError as e:
                logger.warning("Export to %s failed: %s", value, e)
                self.notify(f"Export failed: {e}", severity="error", timeout=5)
                return
            self.notify(f"Exported to {path}", timeout=3)

        self.push_screen(PathPromptScreen("Export chat history", str(Path.cwd())), on_path)

    def action_import_history(self) -> None:
        """Replace the session with an exported file."""

        def on_path(value: str | None) -> None:
            if value is None:
                return
            if self._controller.import_snapshot(value):
                self.notify(f"Imported {len(self._controller.messages)} messages", timeout=3)

        self.push_screen(PathPromptScreen("Import chat history"), on_path)

    def action_cycle_filter(self) -> None:
        """Show all messages, only code, or only text."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        index = FILTER_CYCLE.index(chat.message_filter)
        kind = FILTER_CYCLE[(index + 1) % len(FILTER_CYCLE)]
        chat.load(list(self._controller.messages), self._controller.display_text, kind)
        self.notify(f"Filter: {kind.value}", timeout=2)

    def action_toggle_theme(self) -> None:
        """Switch between dark and light mode and remember the choice."""
        dark_mode = not self._controller.settings.dark_mode
        self._controller.update_settings(dark_mode=dark_mode)

    def action_skip_reveal(self) -> None:
        """Finish every running reveal at once."""
        for message in self._controller.messages:
            if message.reveal_state is RevealState.REVEALING:
                self._controller.skip_reveal(message.id)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(config: AppConfig) -> None:
    """Run the Textual TUI.

    Args:
        config: Application configuration (provider, credential, data dir)
    """
    from ..cli.providers import build_controller

    controller = build_controller(AsyncioScheduler(), config, warn=False)
    app = ParleyApp(controller, has_credential=bool(config.api_key))
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await controller.aclose()
