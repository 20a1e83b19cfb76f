"""Transcript module for parley.

Converts the visible transcript into structured messages and back.
"""

from .models import DEFAULT_PREFIXES, Message, Role, TranscriptPrefixes
from .parser import (
    ERROR_MARKER,
    assistant_prompt_line,
    parse_transcript,
    user_prompt_line,
    welcome_lines,
)

__all__ = [
    "DEFAULT_PREFIXES",
    "ERROR_MARKER",
    "Message",
    "Role",
    "TranscriptPrefixes",
    "assistant_prompt_line",
    "parse_transcript",
    "user_prompt_line",
    "welcome_lines",
]
