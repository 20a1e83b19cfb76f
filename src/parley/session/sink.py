"""Display sink interface.

The sink owns the visible transcript. The session only ever appends to it
and reads it back; how it is drawn is the sink's business.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable


class DisplaySink(ABC):
    """Abstract visible transcript."""

    @abstractmethod
    def append_to_last_line(self, text: str) -> None:
        """Concatenate text onto the last line without starting a new one."""

    @abstractmethod
    def append_lines(self, lines: Iterable[str]) -> None:
        """Append whole lines after the last line."""

    @abstractmethod
    def get_all_lines(self) -> list[str]:
        """Return a copy of the transcript lines in display order."""


class BufferSink(DisplaySink):
    """In-memory transcript, used by the CLI and in tests.

    An optional listener is told about every change as (kind, payload) so a
    caller can mirror the transcript somewhere else, e.g. a terminal.
    """

    def __init__(
        self,
        lines: Iterable[str] | None = None,
        listener: Callable[[str, str | list[str]], None] | None = None,
    ):
        self._lines: list[str] = list(lines) if lines is not None else []
        self._listener = listener

    def append_to_last_line(self, text: str) -> None:
        if self._lines:
            self._lines[-1] += text
        else:
            self._lines.append(text)
        if self._listener:
            self._listener("text", text)

    def append_lines(self, lines: Iterable[str]) -> None:
        new_lines = list(lines)
        self._lines.extend(new_lines)
        if self._listener:
            self._listener("lines", new_lines)

    def get_all_lines(self) -> list[str]:
        return list(self._lines)

    @property
    def text(self) -> str:
        """Transcript joined with newlines."""
        return "\n".join(self._lines)
