"""Main Textual TUI application.

Orchestrates the transcript, status and log widgets and wires them to a
ChatSession.
"""

import asyncio

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..session import ChatConfig, ChatSession
from ..transcript import Role, parse_transcript, welcome_lines
from ..transport import Transport, create_transport
from .callbacks import TUIBridge
from .config import (
    APP_TITLE,
    SEND_KEY_LABEL,
    SEND_KEYS,
    STATUS_REFRESH_INTERVAL,
    THEME,
    LogLevel,
)
from .styles import APP_CSS
from .widgets import DebugPanel, StatusPanel, TextAreaSink, TranscriptArea, copy_text


class ChatApp(App):
    """Textual TUI for chatting through an editable transcript."""

    CSS = APP_CSS
    TITLE = APP_TITLE

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding(SEND_KEYS, "send", "Send", priority=True),
        Binding("escape", "cancel_request", "Cancel"),
        Binding("ctrl+l", "clear_chat", "Clear Chat", priority=True),
        Binding("ctrl+r", "copy_last_response", "Copy Response", priority=True),
        Binding("f2", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        config: ChatConfig,
        transport: Transport | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._transport = transport
        self._log_level = log_level
        self._session: ChatSession | None = None
        self._bridge: TUIBridge | None = None

    @property
    def session(self) -> ChatSession | None:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield TranscriptArea(id="transcript")
        yield StatusPanel(id="status")
        yield DebugPanel(id="debug-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.theme = THEME

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.add_entry("TUI", f"Log level: {self._log_level.upper()}", LogLevel.INFO)

        self._bridge = TUIBridge(self, log_panel, on_error=self._notify_error)

        if self._transport is None:
            transport_config = {"debug_callback": self._bridge.debug_callback}
            if self._config.transport == "httpx":
                transport_config["timeout"] = self._config.timeout
            self._transport = create_transport(self._config.transport, **transport_config)

        area = self.query_one("#transcript", TranscriptArea)
        area.load_text("\n".join(welcome_lines(SEND_KEY_LABEL, self._config.prefixes)))
        area.move_to_end()
        area.focus()

        self._session = ChatSession(
            self._config,
            self._transport,
            TextAreaSink(area),
            dispatch=self._bridge.dispatch,
            debug_callback=self._bridge.debug_callback,
        )

        self.sub_title = f"{self._config.model} | {self._transport.name}"
        status = self.query_one("#status", StatusPanel)
        status.update_status(model=self._config.model, transport=self._transport.name)
        self.set_interval(STATUS_REFRESH_INTERVAL, self._refresh_status)

    def on_unmount(self) -> None:
        """Stop any in-flight request when the app exits."""
        if self._session is not None:
            self._session.cancel()

    def _notify_error(self, component: str, message: str) -> None:
        self.notify(f"{component}: {message[:80]}", severity="error", timeout=5)

    def _refresh_status(self) -> None:
        """Poll the session and mirror its state in the status widgets."""
        if self._session is None:
            return
        busy = self._session.is_busy
        self.query_one("#status", StatusPanel).update_status(
            generation=self._session.generation,
            busy=busy,
        )
        self.query_one("#transcript", TranscriptArea).set_streaming(busy)

    def action_send(self) -> None:
        """Send the transcript, superseding any reply still streaming."""
        if self._session is None:
            return
        self._session.send()
        self._refresh_status()

    def action_cancel_request(self) -> None:
        """Stop the reply that is streaming."""
        if self._session is not None and self._session.cancel():
            self.notify("Cancelled", severity="warning", timeout=2)
            self._refresh_status()

    def action_clear_chat(self) -> None:
        """Cancel any request and start a fresh transcript."""
        if self._session is not None:
            self._session.cancel()
        area = self.query_one("#transcript", TranscriptArea)
        area.load_text("\n".join(welcome_lines(SEND_KEY_LABEL, self._config.prefixes)))
        area.move_to_end()
        self._refresh_status()
        self.notify("Chat cleared", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy the last assistant message to the clipboard."""
        area = self.query_one("#transcript", TranscriptArea)
        messages = parse_transcript(area.text.split("\n"), self._config.prefixes)
        for message in reversed(messages):
            if message.role == Role.ASSISTANT and message.content:
                copy_text(self, message.content)
                self.notify("Response copied")
                return
        self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    config: ChatConfig,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        config: Chat configuration
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = ChatApp(config=config, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
