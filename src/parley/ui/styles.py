"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
/* ============================================
   Layout: transcript fills, status and log sit below it
   ============================================ */
Screen {
    layout: vertical;
}

/* ============================================
   Transcript
   ============================================ */
TranscriptArea {
    height: 1fr;
    border: tall $primary-darken-2;
    border-title-align: left;
    border-title-color: $text-primary;
    border-subtitle-align: right;
    border-subtitle-color: $text-muted;

    &:focus {
        border: tall $primary;
    }

    &.streaming {
        border: tall $success;
        border-subtitle-color: $success;
    }
}

/* ============================================
   Status line
   ============================================ */
StatusPanel {
    height: 1;
    padding: 0 1;
    background: $boost;
}

/* ============================================
   Log panel (hidden until toggled)
   ============================================ */
DebugPanel {
    height: 12;
    border-top: hkey $warning 50%;
    border-title-color: $warning;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    background: $surface-darken-1;
    scrollbar-size-vertical: 1;
}
"""
