"""Event-stream decoding for parley.

Turns a raw streaming response body into ordered text deltas.
"""

from .decoder import LineAssembler, decode_line, decode_stream, parse_frame
from .events import ContentDelta, StreamEnd, StreamError, StreamEvent

__all__ = [
    "ContentDelta",
    "LineAssembler",
    "StreamEnd",
    "StreamError",
    "StreamEvent",
    "decode_line",
    "decode_stream",
    "parse_frame",
]
