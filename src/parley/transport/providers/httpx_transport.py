"""Streaming transport built on httpx.

Runs each request on a daemon thread using a synchronous httpx client and
reports the response body line by line.
"""

import threading

import httpx

from ..base import (
    ChunkCallback,
    CompleteCallback,
    DebugCallback,
    ErrorCallback,
    Transport,
    TransportHandle,
)
from ..models import TransportRequest

# Characters of an error response body kept in the error report
MAX_ERROR_BODY_LENGTH = 2000


class HttpxHandle(TransportHandle):
    """Handle for a request running on an httpx worker thread."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._lock = threading.Lock()
        self._response: httpx.Response | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_running(self) -> bool:
        return not self._finished.is_set()

    def cancel(self) -> None:
        """Stop reading and close the connection without waiting."""
        self._cancelled.set()
        with self._lock:
            response = self._response
        if response is not None:
            response.close()

    def attach(self, response: httpx.Response) -> None:
        with self._lock:
            self._response = response

    def finish(self) -> None:
        with self._lock:
            self._response = None
        self._finished.set()


class HttpxTransport(Transport):
    """Transport that performs the request with httpx on a background thread.

    Hidden design decisions:
    - Thread-per-request execution
    - Client lifetime (a shared client if one is given, else one per request)
    - Mapping HTTP status codes to exit statuses
    """

    def __init__(
        self,
        timeout: float | None = None,
        client: httpx.Client | None = None,
        debug_callback: DebugCallback | None = None,
    ):
        """Initialize the httpx transport.

        Args:
            timeout: Request timeout in seconds (None waits indefinitely)
            client: Optional shared client; the caller keeps ownership
            debug_callback: Optional (level, component, message) logger
        """
        self._timeout = timeout
        self._client = client
        self._debug_callback = debug_callback

    @property
    def name(self) -> str:
        return "httpx"

    def _log(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Transport", message)

    def start(
        self,
        request: TransportRequest,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback,
        on_complete: CompleteCallback,
    ) -> TransportHandle:
        handle = HttpxHandle()
        thread = threading.Thread(
            target=self._run,
            args=(request, handle, on_chunk, on_error, on_complete),
            name="parley-httpx",
            daemon=True,
        )
        thread.start()
        self._log("debug", f"{request.method} {request.url} started on {thread.name}")
        return handle

    def _run(
        self,
        request: TransportRequest,
        handle: HttpxHandle,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback,
        on_complete: CompleteCallback,
    ) -> None:
        """Worker thread body."""
        client = self._client or httpx.Client(timeout=self._timeout)
        try:
            status = self._stream(client, request, handle, on_chunk, on_error)
        finally:
            if self._client is None:
                client.close()
            handle.finish()

        if status is None or handle.cancelled:
            self._log("debug", "Request cancelled")
            return
        on_complete(status)

    def _stream(
        self,
        client: httpx.Client,
        request: TransportRequest,
        handle: HttpxHandle,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback,
    ) -> int | None:
        """Send the request and pump the body. Returns None when cancelled."""
        try:
            with client.stream(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            ) as response:
                handle.attach(response)

                if not response.is_success:
                    body = response.read().decode("utf-8", errors="replace")
                    if len(body) > MAX_ERROR_BODY_LENGTH:
                        body = body[:MAX_ERROR_BODY_LENGTH] + "..."
                    on_error(f"HTTP {response.status_code}: {body}")
                    return response.status_code

                for line in response.iter_lines():
                    if handle.cancelled:
                        return None
                    on_chunk(line)
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            if handle.cancelled:
                return None
            on_error(str(e) or type(e).__name__)
            return 1

        return None if handle.cancelled else 0
