"""Unit tests for the transport module."""
import stat
import sys
import threading
import time

import httpx
import pytest

from parley.errors import TransportError
from parley.transport import (
    CurlTransport,
    HttpxTransport,
    Transport,
    TransportRequest,
    create_transport,
)


@pytest.fixture
def request_():
    return TransportRequest(
        url="https://api.example.test/v1/messages",
        headers=[("content-type", "application/json"), ("x-api-key", "k")],
        body=b'{"stream": true}',
    )


class Recorder:
    """Collects transport callbacks from a worker thread."""

    def __init__(self) -> None:
        self.chunks: list[str] = []
        self.errors: list[str] = []
        self.statuses: list[int] = []
        self.done = threading.Event()

    def on_chunk(self, line: str) -> None:
        self.chunks.append(line)

    def on_error(self, cause: str) -> None:
        self.errors.append(cause)

    def on_complete(self, status: int) -> None:
        self.statuses.append(status)
        self.done.set()

    def start(self, transport: Transport, request: TransportRequest):
        return transport.start(request, self.on_chunk, self.on_error, self.on_complete)


def wait_until_stopped(handle, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while handle.is_running and time.monotonic() < deadline:
        time.sleep(0.01)
    assert not handle.is_running


class TestTransportRequest:
    """Tests for TransportRequest."""

    def test_header_lookup_is_case_insensitive(self, request_):
        assert request_.header("X-API-KEY") == "k"
        assert request_.header("anthropic-version") is None

    def test_defaults(self):
        request = TransportRequest(url="http://localhost")
        assert request.method == "POST"
        assert request.headers == []
        assert request.body == b""


class TestHttpxTransport:
    """Tests for HttpxTransport using httpx.MockTransport."""

    def test_streams_lines_and_completes(self, request_, sse_body):
        """Test that body lines are reported in order and status is 0."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            seen["body"] = request.content
            return httpx.Response(200, content=sse_body.encode("utf-8"))

        client = httpx.Client(transport=httpx.MockTransport(handler))
        recorder = Recorder()

        handle = recorder.start(HttpxTransport(client=client), request_)

        assert recorder.done.wait(5)
        wait_until_stopped(handle)
        assert recorder.statuses == [0]
        assert recorder.errors == []
        assert recorder.chunks == sse_body.split("\n")[:-1]
        assert seen["headers"]["x-api-key"] == "k"
        assert seen["body"] == b'{"stream": true}'

    def test_http_error_reports_body(self, request_):
        """Test that a non-2xx response is an error with its status."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                json={"type": "error", "error": {"type": "authentication_error"}},
            )

        client = httpx.Client(transport=httpx.MockTransport(handler))
        recorder = Recorder()

        recorder.start(HttpxTransport(client=client), request_)

        assert recorder.done.wait(5)
        assert recorder.statuses == [401]
        assert recorder.chunks == []
        assert len(recorder.errors) == 1
        assert recorder.errors[0].startswith("HTTP 401: ")
        assert "authentication_error" in recorder.errors[0]

    def test_connection_failure(self, request_):
        """Test that a network error completes with a non-zero status."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        recorder = Recorder()

        recorder.start(HttpxTransport(client=client), request_)

        assert recorder.done.wait(5)
        assert recorder.statuses == [1]
        assert recorder.errors == ["connection refused"]

    def test_cancel_suppresses_completion(self, request_):
        """Test that a cancelled request reports nothing further."""
        first_line = threading.Event()
        gate = threading.Event()

        def body():
            yield b"data: one\n"
            gate.wait(5)
            yield b"data: two\n"

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body())

        client = httpx.Client(transport=httpx.MockTransport(handler))
        recorder = Recorder()
        on_chunk = recorder.on_chunk

        def chunk(line):
            on_chunk(line)
            first_line.set()

        handle = HttpxTransport(client=client).start(
            request_, chunk, recorder.on_error, recorder.on_complete
        )

        assert first_line.wait(5)
        handle.cancel()
        gate.set()
        wait_until_stopped(handle)

        assert recorder.chunks == ["data: one"]
        assert recorder.statuses == []
        assert recorder.errors == []

    def test_debug_callback(self, request_, log_recorder):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        recorder = Recorder()

        recorder.start(HttpxTransport(client=client, debug_callback=log_recorder), request_)

        assert recorder.done.wait(5)
        assert any(component == "Transport" for _, component, _ in log_recorder.records)


class TestCurlTransport:
    """Tests for CurlTransport."""

    def test_build_args(self, request_):
        """Test the curl command line."""
        args = CurlTransport().build_args(request_)

        assert args == [
            "curl", "-sS", "-N", "--fail-with-body", "-X", "POST",
            "-H", "content-type: application/json",
            "-H", "x-api-key: k",
            "--data-binary", "@-",
            "https://api.example.test/v1/messages",
        ]

    def test_missing_executable(self, request_):
        """Test that a missing curl fails at start."""
        transport = CurlTransport(executable="parley-no-such-curl")

        with pytest.raises(TransportError, match="not found"):
            Recorder().start(transport, request_)

    @pytest.fixture
    def fake_curl(self, tmp_path):
        """Return a factory for executable scripts that stand in for curl."""
        def factory(script: str) -> str:
            path = tmp_path / "curl"
            path.write_text("#!/bin/sh\n" + script)
            path.chmod(path.stat().st_mode | stat.S_IXUSR)
            return str(path)
        return factory

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    def test_streams_stdout_lines(self, request_, fake_curl):
        executable = fake_curl(
            "cat > /dev/null\n"
            "printf 'data: one\\n\\ndata: two\\n'\n"
        )
        recorder = Recorder()

        handle = recorder.start(CurlTransport(executable=executable), request_)

        assert recorder.done.wait(5)
        wait_until_stopped(handle)
        assert recorder.chunks == ["data: one", "", "data: two"]
        assert recorder.errors == []
        assert recorder.statuses == [0]

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    def test_failure_reports_stderr_and_exit_code(self, request_, fake_curl):
        executable = fake_curl(
            "cat > /dev/null\n"
            "echo 'curl: (22) The requested URL returned error: 401' >&2\n"
            "exit 22\n"
        )
        recorder = Recorder()

        recorder.start(CurlTransport(executable=executable), request_)

        assert recorder.done.wait(5)
        assert recorder.statuses == [22]
        assert recorder.errors == ["curl: (22) The requested URL returned error: 401"]

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    def test_cancel_terminates_process(self, request_, fake_curl):
        """Test that cancelling stops curl and reports nothing further."""
        executable = fake_curl(
            "cat > /dev/null\n"
            "printf 'data: one\\n'\n"
            "exec sleep 30\n"
        )
        first_line = threading.Event()
        recorder = Recorder()
        on_chunk = recorder.on_chunk

        def chunk(line):
            on_chunk(line)
            first_line.set()

        handle = CurlTransport(executable=executable).start(
            request_, chunk, recorder.on_error, recorder.on_complete
        )

        assert first_line.wait(5)
        handle.cancel()
        wait_until_stopped(handle)

        assert recorder.chunks == ["data: one"]
        assert recorder.statuses == []
        assert recorder.errors == []

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    def test_unterminated_last_line(self, request_, fake_curl):
        """Test that output without a final newline is still delivered."""
        executable = fake_curl("cat > /dev/null\nprintf 'data: a\\ndata: b'\n")
        recorder = Recorder()

        recorder.start(CurlTransport(executable=executable), request_)

        assert recorder.done.wait(5)
        assert recorder.chunks == ["data: a", "data: b"]
        assert recorder.statuses == [0]


class TestCreateTransport:
    """Tests for the transport factory."""

    def test_httpx(self):
        assert isinstance(create_transport("httpx", timeout=30.0), HttpxTransport)

    def test_curl_case_insensitive(self):
        transport = create_transport("CURL", executable="/usr/bin/curl")
        assert isinstance(transport, CurlTransport)
        assert transport.name == "curl"

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unsupported transport"):
            create_transport("websocket")

    def test_transport_is_abstract(self):
        with pytest.raises(TypeError):
            Transport()  # type: ignore
