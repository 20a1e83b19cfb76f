"""Terminal UI module for parley.

Provides a Textual-based TUI around an editable transcript.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (transcript area and its sink, status, log panel)
- styles.py: CSS styling (layout decisions)
- callbacks.py: Thread bridge (how background work reaches the app)
- config.py: Key bindings and display constants
- app.py: Application orchestration (user interaction flow)
"""

from .app import ChatApp, run_textual_tui
from .callbacks import TUIBridge
from .config import LogLevel
from .widgets import DebugPanel, StatusPanel, TextAreaSink, TranscriptArea

__all__ = [
    "ChatApp",
    "DebugPanel",
    "LogLevel",
    "StatusPanel",
    "TUIBridge",
    "TextAreaSink",
    "TranscriptArea",
    "run_textual_tui",
]
