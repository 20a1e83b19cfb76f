"""Server-sent event decoder for the Messages streaming API.

Hides the wire framing of the streaming response:
- which lines carry data and which are keep-alives or event names
- the JSON payload shape of each event type
- reassembly of lines from arbitrarily split byte chunks

Malformed frames are expected when a payload is cut at a chunk boundary,
so they are dropped instead of aborting the stream.
"""

import codecs
import json
from collections.abc import Iterable, Iterator
from typing import Any

import httpx

from ..errors import DecodeError
from .events import ContentDelta, StreamEnd, StreamError, StreamEvent

DATA_MARKER = "data:"

CONTENT_DELTA_TYPE = "content_block_delta"

# Event types that exist on the wire but carry nothing this client renders
IGNORED_EVENT_TYPES = frozenset({
    "message_start",
    "content_block_start",
    "content_block_stop",
    "message_delta",
    "message_stop",
    "ping",
    "error",
})


def parse_frame(payload: str, strict: bool = False) -> dict[str, Any] | None:
    """Parse the JSON payload of a data line.

    Args:
        payload: Text after the data marker
        strict: Raise DecodeError instead of returning None

    Returns:
        The decoded event object, or None if it is not a JSON object
    """
    try:
        frame = json.loads(payload)
    except json.JSONDecodeError as e:
        if strict:
            raise DecodeError(f"Malformed frame: {payload[:80]!r}") from e
        return None

    if not isinstance(frame, dict):
        if strict:
            raise DecodeError(f"Frame is not an object: {payload[:80]!r}")
        return None
    return frame


def decode_line(line: str | bytes) -> ContentDelta | None:
    """Decode one line of the response body.

    Returns a ContentDelta for text deltas and None for everything else:
    blank keep-alives, comments, event-name lines, malformed JSON and
    event types without renderable text.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")

    if not line.startswith(DATA_MARKER):
        return None

    frame = parse_frame(line[len(DATA_MARKER):].lstrip())
    if frame is None:
        return None

    if frame.get("type") != CONTENT_DELTA_TYPE:
        return None

    delta = frame.get("delta")
    if not isinstance(delta, dict):
        return None
    text = delta.get("text")
    if not isinstance(text, str):
        return None
    return ContentDelta(text=text)


def decode_stream(lines: Iterable[str | bytes]) -> Iterator[StreamEvent]:
    """Lazily decode a response body into stream events.

    Yields one ContentDelta per text-delta line, in order, followed by
    exactly one terminal event: StreamEnd when the source is exhausted, or
    StreamError when reading it fails.
    """
    try:
        for line in lines:
            event = decode_line(line)
            if event is not None:
                yield event
    except (OSError, httpx.HTTPError) as e:
        yield StreamError(cause=str(e) or type(e).__name__)
        return
    yield StreamEnd()


class LineAssembler:
    """Reassemble complete lines from raw response chunks.

    Only the trailing partial line is buffered; every complete line is
    returned as soon as its newline arrives.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add a chunk and return the lines it completed."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._pending += chunk

        *complete, self._pending = self._pending.split("\n")
        return [line.removesuffix("\r") for line in complete]

    def flush(self) -> list[str]:
        """Return the unterminated remainder at end of stream."""
        rest = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return [rest.removesuffix("\r")] if rest else []
