"""Pytest configuration and shared fixtures."""
import json
from dataclasses import dataclass, field

import pytest

from parley.session import BufferSink, ChatConfig
from parley.transport import Transport, TransportHandle, TransportRequest


def delta_frame(text: str) -> str:
    """Build a content delta data line as the API sends it."""
    payload = {
        "type": "content_block_delta",
        "index": 0,
        "delta": {"type": "text_delta", "text": text},
    }
    return "data: " + json.dumps(payload)


class FakeHandle(TransportHandle):
    """Handle that only records cancellation."""

    def __init__(self) -> None:
        self.cancelled = False
        self.finished = False

    @property
    def is_running(self) -> bool:
        return not (self.cancelled or self.finished)

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeCall:
    """One recorded transport start; tests drive its callbacks by hand."""

    request: TransportRequest
    on_chunk: object
    on_error: object
    on_complete: object
    handle: FakeHandle = field(default_factory=FakeHandle)

    @property
    def payload(self) -> dict:
        return json.loads(self.request.body)

    def emit(self, *lines: str) -> None:
        for line in lines:
            self.on_chunk(line)

    def complete(self, status: int = 0) -> None:
        self.handle.finished = True
        self.on_complete(status)


class FakeTransport(Transport):
    """Transport that records requests instead of sending them."""

    def __init__(self) -> None:
        self.calls: list[FakeCall] = []

    @property
    def name(self) -> str:
        return "fake"

    def start(self, request, on_chunk, on_error, on_complete) -> TransportHandle:
        call = FakeCall(request, on_chunk, on_error, on_complete)
        self.calls.append(call)
        return call.handle


class RecordingSink(BufferSink):
    """Buffer sink that also records every call made on it."""

    def __init__(self, lines=None) -> None:
        super().__init__(lines)
        self.calls: list[tuple[str, object]] = []

    def append_to_last_line(self, text: str) -> None:
        self.calls.append(("append_to_last_line", text))
        super().append_to_last_line(text)

    def append_lines(self, lines) -> None:
        lines = list(lines)
        self.calls.append(("append_lines", lines))
        super().append_lines(lines)


class LogRecorder:
    """Collects (level, component, message) records."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, str]] = []

    def __call__(self, level: str, component: str, message: str) -> None:
        self.records.append((level, component, message))

    def at(self, level: str) -> list[tuple[str, str, str]]:
        return [record for record in self.records if record[0] == level]


@pytest.fixture
def config():
    """Return a default chat configuration."""
    return ChatConfig()


@pytest.fixture
def environ():
    """Return an environment with an API key set."""
    return {"ANTHROPIC_API_KEY": "test-key"}


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def log_recorder():
    return LogRecorder()


@pytest.fixture
def sse_body():
    """Return a realistic streaming response body."""
    return "\n".join([
        "event: message_start",
        'data: {"type": "message_start", "message": {"id": "msg_1", "role": "assistant", '
        '"content": [], "model": "claude-3-5-sonnet-20241022", "usage": {"input_tokens": 10, '
        '"output_tokens": 1}}}',
        "",
        "event: content_block_start",
        'data: {"type": "content_block_start", "index": 0, '
        '"content_block": {"type": "text", "text": ""}}',
        "",
        "event: ping",
        'data: {"type": "ping"}',
        "",
        "event: content_block_delta",
        delta_frame("Hello"),
        "",
        "event: content_block_delta",
        delta_frame(", wörld"),
        "",
        "event: content_block_stop",
        'data: {"type": "content_block_stop", "index": 0}',
        "",
        "event: message_delta",
        'data: {"type": "message_delta", "delta": {"stop_reason": "end_turn", '
        '"stop_sequence": null}, "usage": {"output_tokens": 5}}',
        "",
        "event: message_stop",
        'data: {"type": "message_stop"}',
        "",
    ])
