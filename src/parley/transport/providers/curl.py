"""Streaming transport that shells out to curl.

Mirrors running `curl -s -N` as a background job: stdout lines are the
response body, stderr is reported as an error, and the exit code becomes the
completion status.
"""

import shutil
import subprocess
import threading

from ...errors import TransportError
from ...stream import LineAssembler
from ..base import (
    ChunkCallback,
    CompleteCallback,
    DebugCallback,
    ErrorCallback,
    Transport,
    TransportHandle,
)
from ..models import TransportRequest

# Bytes requested per read of curl's stdout
READ_SIZE = 4096


class CurlHandle(TransportHandle):
    """Handle for a running curl process."""

    def __init__(self, process: subprocess.Popen) -> None:
        self._process = process
        self._cancelled = threading.Event()
        self._finished = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_running(self) -> bool:
        return not self._finished.is_set()

    def cancel(self) -> None:
        """Terminate the curl process without waiting for it to exit."""
        self._cancelled.set()
        if self._process.poll() is None:
            self._process.terminate()

    def finish(self) -> None:
        self._finished.set()


class CurlTransport(Transport):
    """Transport that runs the request through the curl executable."""

    def __init__(
        self,
        executable: str = "curl",
        debug_callback: DebugCallback | None = None,
    ):
        self._executable = executable
        self._debug_callback = debug_callback

    @property
    def name(self) -> str:
        return "curl"

    def _log(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Transport", message)

    def build_args(self, request: TransportRequest) -> list[str]:
        """Build the curl command line; the body is read from stdin."""
        args = [self._executable, "-sS", "-N", "--fail-with-body", "-X", request.method]
        for name, value in request.headers:
            args.extend(["-H", f"{name}: {value}"])
        args.extend(["--data-binary", "@-", request.url])
        return args

    def start(
        self,
        request: TransportRequest,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback,
        on_complete: CompleteCallback,
    ) -> TransportHandle:
        if shutil.which(self._executable) is None:
            raise TransportError(f"{self._executable} not found on PATH")

        try:
            process = subprocess.Popen(
                self.build_args(request),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise TransportError(f"Failed to start {self._executable}: {e}") from e

        handle = CurlHandle(process)
        thread = threading.Thread(
            target=self._run,
            args=(request, process, handle, on_chunk, on_error, on_complete),
            name="parley-curl",
            daemon=True,
        )
        thread.start()
        self._log("debug", f"curl pid {process.pid} started")
        return handle

    def _run(
        self,
        request: TransportRequest,
        process: subprocess.Popen,
        handle: CurlHandle,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback,
        on_complete: CompleteCallback,
    ) -> None:
        """Worker thread body: feed stdin, pump stdout, collect stderr."""
        try:
            with process:
                code, stderr = self._pump(request, process, handle, on_chunk)
        finally:
            handle.finish()

        if handle.cancelled:
            self._log("debug", f"curl pid {process.pid} cancelled")
            return

        if stderr:
            on_error(stderr)
        elif code != 0:
            on_error(f"curl exited with status {code}")
        on_complete(code)

    def _pump(
        self,
        request: TransportRequest,
        process: subprocess.Popen,
        handle: CurlHandle,
        on_chunk: ChunkCallback,
    ) -> tuple[int, str]:
        """Stream stdout to on_chunk until EOF or cancel. Returns (exit code, stderr)."""
        stderr_parts: list[bytes] = []
        stderr_thread = threading.Thread(
            target=lambda: stderr_parts.append(process.stderr.read()),
            name="parley-curl-stderr",
            daemon=True,
        )
        stderr_thread.start()

        try:
            process.stdin.write(request.body)
            process.stdin.close()
        except BrokenPipeError:
            pass  # curl exited early; its exit code reports why

        assembler = LineAssembler()
        while not handle.cancelled:
            chunk = process.stdout.read1(READ_SIZE)
            if not chunk:
                break
            for line in assembler.feed(chunk):
                if handle.cancelled:
                    break
                on_chunk(line)
        if not handle.cancelled:
            for line in assembler.flush():
                on_chunk(line)

        code = process.wait()
        stderr_thread.join()
        stderr = b"".join(stderr_parts).decode("utf-8", errors="replace").strip()
        return code, stderr
