"""Chat session module for parley.

Owns the request lifecycle: at most one streaming request per session,
superseded by each new send.
"""

from .config import ChatConfig, resolve_api_key
from .controller import ActiveRequest, ChatSession
from .dispatch import Dispatcher, QueueDispatcher, call_inline
from .sink import BufferSink, DisplaySink

__all__ = [
    "ActiveRequest",
    "BufferSink",
    "ChatConfig",
    "ChatSession",
    "DisplaySink",
    "Dispatcher",
    "QueueDispatcher",
    "call_inline",
    "resolve_api_key",
]
