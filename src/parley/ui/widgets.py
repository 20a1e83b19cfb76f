"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Editable transcript and how streamed text is appended to it
- Request status display
- Log rendering and level filtering
"""

from collections.abc import Iterable
from datetime import datetime

from rich.text import Text
from textual.events import Click
from textual.widgets import RichLog, Static, TextArea

from ..session import DisplaySink
from .config import LOG_MAX_MESSAGE_LENGTH, LOG_TIMESTAMP_FORMAT, LogLevel


class TranscriptArea(TextArea):
    """Editable conversation transcript.

    The user types after the last "You: " line and may edit anything above
    it; the whole text is parsed again on every send.
    """

    BORDER_TITLE = "Claude Chat"
    BORDER_SUBTITLE = "Idle"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, soft_wrap=True, show_line_numbers=False, **kwargs)

    def move_to_end(self) -> None:
        """Put the cursor at the end of the transcript and scroll to it."""
        self.move_cursor(self.document.end)
        self.scroll_cursor_visible()

    def set_streaming(self, streaming: bool) -> None:
        """Reflect whether a reply is being streamed."""
        self.set_class(streaming, "streaming")
        self.border_subtitle = "Streaming..." if streaming else "Idle"


class TextAreaSink(DisplaySink):
    """Display sink backed by a TranscriptArea.

    Must only be used from the app thread.
    """

    def __init__(self, area: TranscriptArea) -> None:
        self._area = area

    def append_to_last_line(self, text: str) -> None:
        if text:
            self._area.insert(text, self._area.document.end)
            self._area.move_to_end()

    def append_lines(self, lines: Iterable[str]) -> None:
        new_lines = list(lines)
        if not new_lines:
            return
        self._area.insert("\n" + "\n".join(new_lines), self._area.document.end)
        self._area.move_to_end()

    def get_all_lines(self) -> list[str]:
        return self._area.text.split("\n")


class StatusPanel(Static):
    """One-line panel showing model, request number and state."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = ""
        self._generation = 0
        self._busy = False
        self._transport = ""

    def on_mount(self) -> None:
        self._update_display()

    def update_status(
        self,
        model: str | None = None,
        generation: int | None = None,
        busy: bool | None = None,
        transport: str | None = None,
    ) -> None:
        """Update any subset of the displayed fields."""
        if model is not None:
            self._model = model
        if generation is not None:
            self._generation = generation
        if busy is not None:
            self._busy = busy
        if transport is not None:
            self._transport = transport
        self._update_display()

    def _update_display(self) -> None:
        state = "[bold yellow]streaming[/]" if self._busy else "[bold green]idle[/]"
        parts = [
            f"[bold cyan]Model:[/] {self._model}",
            f"[bold magenta]Request:[/] #{self._generation}",
            f"[bold]State:[/] {state}",
            f"[dim]{self._transport}[/]",
        ]
        self.update("  ".join(parts))

    def get_plain_text(self) -> str:
        """Get status as plain text for clipboard."""
        state = "streaming" if self._busy else "idle"
        return f"Model: {self._model}  Request: #{self._generation}  State: {state}"


class DebugPanel(RichLog):
    """Trace log of session and transport records.

    Records below the threshold are discarded, not hidden, so lowering the
    threshold later does not bring them back. Hidden until shown with
    --log-level or toggled with F2; clicking copies the log.
    """

    BORDER_TITLE = "Log"

    _LEVEL_STYLES = {
        LogLevel.DEBUG: "dim",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "bold red",
    }

    _COMPONENT_STYLES = {
        "TUI": "blue",
        "Session": "green",
        "Transport": "magenta",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(*args, highlight=False, markup=False, wrap=True, **kwargs)
        self._log_level = log_level
        self.display = False

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def on_mount(self) -> None:
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        self.border_subtitle = (
            f"{LogLevel.name(self._log_level)} and above" if self.display else "Hidden"
        )

    def add_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Write one record if it meets the threshold.

        The message is appended as plain text; it may contain response
        bodies with square brackets.
        """
        if level < self._log_level:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        self.write(Text.assemble(
            (datetime.now().strftime(LOG_TIMESTAMP_FORMAT) + " ", "dim"),
            (f"{LogLevel.name(level):<7} ", self._LEVEL_STYLES.get(level, "")),
            (f"[{component}] ", self._COMPONENT_STYLES.get(component, "")),
            message,
        ))

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def toggle(self) -> bool:
        """Flip visibility and return whether the panel is now shown."""
        self.display = not self.display
        self._update_subtitle()
        return self.display

    def get_plain_text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Log is empty", timeout=2)
            return
        copy_text(self.app, text)
        self.app.notify("Log copied", timeout=2)


def copy_text(app, text: str) -> None:
    """Copy to the system clipboard, falling back to the terminal (OSC 52)."""
    import pyperclip

    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException:
        app.copy_to_clipboard(text)
