"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* Chat history fills the space above the input */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

.welcome {
    width: 100%;
    content-align: center middle;
    color: $text-muted;
    padding: 2 0;
}

.chat-message {
    height: auto;
    margin: 1 0 0 0;
    padding: 0 1;
}

.user-message {
    border-left: thick $secondary;
}

.assistant-message {
    border-left: thick $primary;
}

.revealing {
    border-left: thick $accent;
}

.message-header {
    color: $text-muted;
    text-style: bold;
}

.message-content {
    height: auto;
}

/* Error banner, hidden until an error is reported */
#error-banner {
    height: auto;
    display: none;
    background: $error 15%;
    border-left: thick $error;
    color: $error;
    padding: 0 1;

    &.-visible {
        display: block;
    }
}

#chat-input-bar {
    height: auto;
    max-height: 10;
    layout: horizontal;
    padding: 0;

    &.-busy #send-btn {
        opacity: 50%;
    }
}

#chat-input {
    width: 1fr;
    height: auto;
    min-height: 3;
    max-height: 8;
    border: round $border;

    &:focus {
        border: round $primary;
    }
}

#send-btn {
    width: 10;
    height: 3;
    margin: 0 0 0 1;
}
"""
