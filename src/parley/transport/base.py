from abc import ABC, abstractmethod
from collections.abc import Callable

from .models import TransportRequest

ChunkCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]
CompleteCallback = Callable[[int], None]
DebugCallback = Callable[[str, str, str], None]


class TransportHandle(ABC):
    """Handle to one in-flight streaming request."""

    @abstractmethod
    def cancel(self) -> None:
        """Ask the request to stop.

        Best-effort and non-blocking: callbacks already queued may still be
        delivered after this returns.
        """

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether the request is still producing output."""


class Transport(ABC):
    """Abstract base class for streaming HTTP transports.

    This module hides the design decision of how the request is actually
    performed. Implementations must handle:
    - Running the request in the background so start() returns immediately
    - Delivering each body line to on_chunk, in order, without its newline
    - Reporting failures to on_error before completion
    - Reporting exactly one on_complete with 0 for success, non-zero otherwise

    Callbacks are invoked from a background thread. Callers that touch
    shared state must marshal them onto their own thread.
    """

    @abstractmethod
    def start(
        self,
        request: TransportRequest,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback,
        on_complete: CompleteCallback,
    ) -> TransportHandle:
        """Start a streaming request.

        Args:
            request: Request to send
            on_chunk: Called with each raw response line
            on_error: Called with a description of a failure
            on_complete: Called once with the exit status

        Returns:
            Handle that can cancel the request

        Raises:
            TransportError: If the request could not be started at all
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the transport type identifier."""
