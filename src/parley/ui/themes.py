"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Dark/light mode configuration

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Catppuccin Mocha for dark mode
CATPPUCCIN_MOCHA = Theme(
    name="catppuccin-mocha",
    primary="#89b4fa",      # Blue - main accent
    secondary="#cba6f7",    # Mauve - secondary accent
    accent="#f9e2af",       # Yellow - highlights
    foreground="#cdd6f4",   # Light text
    background="#11111b",   # Crust - deepest background
    success="#a6e3a1",
    warning="#fab387",
    error="#f38ba8",
    surface="#1e1e2e",
    panel="#181825",
    dark=True,
    variables={
        "border": "#45475a",
        "border-blurred": "#313244",
        "scrollbar": "#313244",
        "scrollbar-hover": "#45475a",
        "scrollbar-active": "#89b4fa",
        "scrollbar-background": "#181825",
        "footer-key-foreground": "#f9e2af",
        "text-muted": "#6c7086",
    },
)

# Catppuccin Latte for light mode
CATPPUCCIN_LATTE = Theme(
    name="catppuccin-latte",
    primary="#1e66f5",      # Blue
    secondary="#8839ef",    # Mauve
    accent="#df8e1d",       # Yellow
    foreground="#4c4f69",   # Text
    background="#eff1f5",   # Base
    success="#40a02b",
    warning="#fe640b",
    error="#d20f39",
    surface="#e6e9ef",      # Mantle
    panel="#dce0e8",        # Crust
    dark=False,
    variables={
        "border": "#bcc0cc",
        "border-blurred": "#ccd0da",
        "scrollbar": "#ccd0da",
        "scrollbar-hover": "#bcc0cc",
        "scrollbar-active": "#1e66f5",
        "scrollbar-background": "#e6e9ef",
        "footer-key-foreground": "#df8e1d",
        "text-muted": "#8c8fa1",
    },
)


def theme_for(dark_mode: bool) -> str:
    """Name of the registered theme for a color scheme."""
    return CATPPUCCIN_MOCHA.name if dark_mode else CATPPUCCIN_LATTE.name
