"""Thread bridge between background transports and the TUI.

Hides the details of how work from transport threads reaches the app:
everything is routed through the app's message loop so that widgets and
the chat session are only touched from the app thread.
"""

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .config import LogLevel

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel


class TUIBridge:
    """Dispatcher and log sink for a running Textual app.

    Uses call_from_thread when called off the app thread and calls directly
    otherwise.
    """

    def __init__(
        self,
        app: "App",
        log_panel: "DebugPanel",
        on_error: Callable[[str, str], None] | None = None,
    ) -> None:
        self.app = app
        self.log_panel = log_panel
        self._on_error = on_error

    def _call_thread_safe(self, func: Any, *args: Any, **kwargs: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        if self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args, **kwargs)
        else:
            func(*args, **kwargs)

    def dispatch(self, func: Callable[[], None]) -> None:
        """Run func on the app thread; used as the chat session dispatcher."""
        self._call_thread_safe(func)

    def debug_callback(self, level: str, component: str, message: str) -> None:
        """Route (level, component, message) log records to the log panel."""
        self._call_thread_safe(self._write_log, level, component, message)

    def _write_log(self, level: str, component: str, message: str) -> None:
        self.log_panel.add_entry(component, message, LogLevel.from_string(level))
        if level == "error" and self._on_error is not None:
            self._on_error(component, message)
