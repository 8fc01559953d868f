"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout, top to bottom: scrollback, optional log panel, status bar,
input prompt, help line.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Stacked Regions
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Scrollback - Banner, Turns, Live Stream
   ============================================ */
#scrollback {
    height: 1fr;
    background: $surface;
    padding: 0 1;
    scrollbar-gutter: stable;
}

#welcome-banner {
    height: auto;
    margin-bottom: 1;
}

.chat-message {
    width: 100%;
    height: auto;
    padding: 0;
    margin: 0 0 1 0;
    background: transparent;
}

.error-message {
    color: $error;
}

#stream-view {
    height: auto;
    padding: 0;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;

    &:focus {
        border: round $warning;
    }
}

/* ============================================
   Status Bar - One Powerline Row
   ============================================ */
#status-bar {
    height: 1;
    width: 100%;
    background: $panel;
}

/* ============================================
   Input Prompt
   ============================================ */
#prompt {
    height: 3;
    border: round $primary 60%;
    background: $panel;
    padding: 0 1;

    &:focus {
        border: round $primary;
    }

    &.-streaming {
        border: round $warning 60%;
    }
}

/* ============================================
   Help Line
   ============================================ */
#help-line {
    height: 1;
    padding: 0 1;
    color: $text-muted;
    background: $background;
}

/* ============================================
   Scrollbar Styling - Subtle and Refined
   ============================================ */
* {
    scrollbar-background: $panel;
    scrollbar-color: $surface-lighten-1;
    scrollbar-color-hover: $primary 50%;
    scrollbar-color-active: $primary;
    scrollbar-size: 1 1;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
        background: $primary 12%;
        color: $foreground;
    }

    &.-warning {
        border: tall $warning;
        background: $warning 12%;
        color: $foreground;
    }
}
"""
