"""Request lifecycle controller.

Hides how a send is turned into a streaming request and how its output
reaches the transcript:
- which request is current (at most one per session)
- supersession of an in-flight request by a newer send
- marshalling transport callbacks onto the control thread
- dropping output of cancelled requests (generation guard)
"""

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import ConfigurationError, StaleDeltaError, TransportError
from ..stream import ContentDelta, StreamEnd, StreamError, StreamEvent, decode_line
from ..transcript import (
    ERROR_MARKER,
    Message,
    assistant_prompt_line,
    parse_transcript,
    user_prompt_line,
)
from ..transport import Transport, TransportHandle, TransportRequest
from .config import ChatConfig, resolve_api_key
from .dispatch import Dispatcher, call_inline
from .sink import DisplaySink

DebugCallback = Callable[[str, str, str], None]


@dataclass
class ActiveRequest:
    """The single in-flight request of a session."""

    generation: int
    handle: TransportHandle | None = None
    error: str | None = None


class ChatSession:
    """One chat conversation bound to a display sink.

    All public methods and every dispatched callback must run on the same
    control thread. Transports call back from their own threads; those calls
    are wrapped so they only take effect through the dispatcher.

    Usage:
        session = ChatSession(config, transport, sink, dispatch=dispatcher)
        session.send()        # returns immediately
        ...                   # deltas arrive through the dispatcher
    """

    def __init__(
        self,
        config: ChatConfig,
        transport: Transport,
        sink: DisplaySink,
        *,
        dispatch: Dispatcher = call_inline,
        debug_callback: DebugCallback | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize a chat session.

        Args:
            config: Endpoint, model and header settings
            transport: Transport used to perform requests
            sink: Visible transcript
            dispatch: Runs a function on the control thread
            debug_callback: Optional (level, component, message) logger
            environ: Environment to read the API key from (default: os.environ)
        """
        self._config = config
        self._transport = transport
        self._sink = sink
        self._dispatch = dispatch
        self._debug_callback = debug_callback
        self._environ = environ
        self._generation = 0
        self._active: ActiveRequest | None = None

    @property
    def config(self) -> ChatConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Generation of the most recently started request."""
        return self._generation

    @property
    def is_busy(self) -> bool:
        """Whether a request is in flight."""
        return self._active is not None

    def _log(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    def build_payload(self, messages: Sequence[Message]) -> dict[str, Any]:
        """Build the Messages API request body."""
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [msg.to_wire() for msg in messages],
            "stream": True,
            "max_tokens": self._config.max_tokens,
        }
        if self._config.system:
            payload["system"] = self._config.system
        return payload

    def build_request(self, payload: dict[str, Any], api_key: str) -> TransportRequest:
        """Wrap a payload with the endpoint and required headers."""
        return TransportRequest(
            method="POST",
            url=self._config.api_url,
            headers=[
                ("content-type", self._config.content_type),
                (self._config.api_key_header, api_key),
                (self._config.api_version_header, self._config.api_version),
            ],
            body=json.dumps(payload).encode("utf-8"),
        )

    def cancel(self) -> bool:
        """Cancel the in-flight request, if any, without waiting.

        Output that the cancelled request still delivers is dropped.

        Returns:
            True if a request was cancelled
        """
        active = self._active
        if active is None:
            return False

        self._active = None
        if active.handle is not None:
            active.handle.cancel()
        self._log("info", f"Cancelled request #{active.generation}")
        return True

    def send(self, current_lines: Sequence[str] | None = None) -> bool:
        """Send the conversation in the transcript.

        Supersedes any in-flight request. Returns as soon as the transport
        has been started; the reply is applied through the dispatcher.

        Args:
            current_lines: Transcript to send (default: the sink's lines)

        Returns:
            True if a request was started
        """
        self.cancel()

        lines = self._sink.get_all_lines() if current_lines is None else current_lines
        messages = parse_transcript(lines, self._config.prefixes)
        if not messages:
            self._log("info", "Nothing to send: no messages in transcript")
            return False
        self._log("debug", f"Parsed {len(messages)} message(s)")

        try:
            api_key = resolve_api_key(self._config, self._environ)
        except ConfigurationError as e:
            self._log("error", f"Configuration error: {e}")
            return False

        request = self.build_request(self.build_payload(messages), api_key)

        self._generation += 1
        generation = self._generation
        active = ActiveRequest(generation=generation)
        self._active = active

        self._sink.append_lines([assistant_prompt_line(self._config.prefixes)])
        self._log("info", f"Request #{generation} to {self._config.model}")

        try:
            active.handle = self._transport.start(
                request,
                on_chunk=self._marshal(generation, self._on_chunk),
                on_error=self._marshal(generation, self._on_error),
                on_complete=self._marshal(generation, self._on_complete),
            )
        except TransportError as e:
            self._on_error(generation, str(e))
            self._finish(generation, StreamError(cause=str(e)))
            return False
        return True

    def _marshal(
        self,
        generation: int,
        handler: Callable[[int, Any], None],
    ) -> Callable[[Any], None]:
        """Wrap a handler so it runs on the control thread, tagged with its generation."""
        def callback(value: Any) -> None:
            self._dispatch(lambda: handler(generation, value))
        return callback

    def _check_current(self, generation: int) -> ActiveRequest:
        """Return the active request if it belongs to this generation.

        Raises:
            StaleDeltaError: If the generation was superseded or already finished
        """
        active = self._active
        if active is None or active.generation != generation:
            raise StaleDeltaError(generation, active.generation if active else None)
        return active

    def _on_chunk(self, generation: int, line: str) -> None:
        try:
            self._check_current(generation)
        except StaleDeltaError:
            return

        event = decode_line(line)
        if event is not None:
            self._apply(event)

    def _on_error(self, generation: int, cause: str) -> None:
        try:
            active = self._check_current(generation)
        except StaleDeltaError as e:
            self._log("debug", f"Dropped error: {e}")
            return

        active.error = cause
        self._log("error", f"Request #{generation} failed: {cause}")

    def _on_complete(self, generation: int, status: int) -> None:
        try:
            active = self._check_current(generation)
        except StaleDeltaError as e:
            self._log("debug", f"Dropped completion: {e}")
            return

        if status == 0:
            self._finish(generation, StreamEnd())
        else:
            cause = active.error
            if cause is None:
                cause = f"exit status {status}"
                self._log("error", f"Request #{generation} failed: {cause}")
            self._finish(generation, StreamError(cause=cause))

    def _finish(self, generation: int, event: StreamEvent) -> None:
        """Apply the terminal event and return to idle."""
        if self._active is not None and self._active.generation == generation:
            self._active = None
        self._log("info", f"Request #{generation} finished: {event.kind}")
        self._apply(event)

    def _apply(self, event: StreamEvent) -> None:
        """Render one stream event into the transcript."""
        prompt = user_prompt_line(self._config.prefixes)
        if isinstance(event, ContentDelta):
            self._sink.append_to_last_line(event.text)
        elif isinstance(event, StreamEnd):
            self._sink.append_lines(["", prompt])
        elif isinstance(event, StreamError):
            self._sink.append_lines([ERROR_MARKER, "", prompt])
