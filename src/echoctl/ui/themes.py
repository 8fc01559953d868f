"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, input cursor)

The palette matches the colors used by formatting.py for Rich output, so
the inline renderer and the full-screen app look alike.
"""

from textual.theme import Theme

ECHORYN_DARK = Theme(
    name="echoryn-dark",
    primary="#89b4fa",      # Blue - prompt and user turns
    secondary="#f5c2e7",    # Pink - assistant label
    accent="#fab387",       # Peach - banner and spinner
    foreground="#cdd6f4",
    background="#11111b",
    success="#a6e3a1",      # Green - Ready status
    warning="#fab387",      # Peach - Generating status
    error="#f38ba8",        # Red - error blocks
    surface="#1e1e2e",
    panel="#181825",
    dark=True,
    variables={
        "input-cursor-background": "#cdd6f4",
        "input-cursor-foreground": "#11111b",
        "input-selection-background": "#89b4fa 30%",
        "border": "#45475a",
        "border-blurred": "#313244",
        "scrollbar": "#313244",
        "scrollbar-hover": "#45475a",
        "scrollbar-active": "#89b4fa",
        "scrollbar-background": "#181825",
        "text-muted": "#6c7086",
    },
)
