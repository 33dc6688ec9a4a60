"""Terminal UI module for parley.

Provides a Textual-based TUI on top of the session controller.

Module structure (Parnas principle - each module hides a design decision):
- widgets.py: Custom widgets (message rendering, reveal display, error banner, input)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (confirmation, path prompts)
- app.py: Application orchestration (user interaction flow)
"""

from .app import ParleyApp, run_textual_tui
from .widgets import ChatHistoryWidget, ChatInputBar, ErrorBanner, MessageView

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "ErrorBanner",
    "MessageView",
    "ParleyApp",
    "run_textual_tui",
]
