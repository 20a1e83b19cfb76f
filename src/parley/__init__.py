"""
Parley: a terminal chat client that streams replies into an editable transcript.

The core is split into modules that each hide one design decision:
transcript parsing, event-stream decoding, transports and the chat session.
"""

__version__ = "0.1.0"

from .errors import ConfigurationError, ParleyError, TransportError
from .session import BufferSink, ChatConfig, ChatSession, DisplaySink
from .stream import ContentDelta, StreamEnd, StreamError, decode_line, decode_stream
from .transcript import Message, Role, parse_transcript
from .transport import Transport, TransportRequest, create_transport

__all__ = [
    "BufferSink",
    "ChatConfig",
    "ChatSession",
    "ConfigurationError",
    "ContentDelta",
    "DisplaySink",
    "Message",
    "ParleyError",
    "Role",
    "StreamEnd",
    "StreamError",
    "Transport",
    "TransportError",
    "TransportRequest",
    "create_transport",
    "decode_line",
    "decode_stream",
    "parse_transcript",
]
