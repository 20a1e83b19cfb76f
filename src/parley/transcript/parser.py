"""Transcript parsing.

Hides how a free-form, human-editable transcript is turned back into an
ordered list of role-tagged messages, and which lines the client writes
around a turn.
"""

from collections.abc import Iterable

from .models import DEFAULT_PREFIXES, Message, Role, TranscriptPrefixes

ERROR_MARKER = "[API Error - Check logs]"


def parse_transcript(
    lines: Iterable[str],
    prefixes: TranscriptPrefixes = DEFAULT_PREFIXES,
) -> list[Message]:
    """Reconstruct the conversation from transcript lines.

    A line starting with a role prefix opens a new message. Non-empty lines
    without a prefix continue the current message, joined with a newline.
    Blank continuation lines are dropped, as are lines that appear before
    the first prefixed line.

    Args:
        lines: Transcript lines in display order (never modified)
        prefixes: Role prefixes to recognise

    Returns:
        Messages in transcript order; empty if no prefixed line was found
    """
    messages: list[Message] = []
    role: Role | None = None
    parts: list[str] = []

    for line in lines:
        if line.startswith(prefixes.user):
            if role is not None:
                messages.append(Message(role=role, content="\n".join(parts)))
            role, parts = Role.USER, [line[len(prefixes.user):]]
        elif line.startswith(prefixes.assistant):
            if role is not None:
                messages.append(Message(role=role, content="\n".join(parts)))
            role, parts = Role.ASSISTANT, [line[len(prefixes.assistant):]]
        elif role is not None and line:
            parts.append(line)

    if role is not None:
        messages.append(Message(role=role, content="\n".join(parts)))

    return messages


def user_prompt_line(prefixes: TranscriptPrefixes = DEFAULT_PREFIXES) -> str:
    """Line that invites the next user turn."""
    return prefixes.user


def assistant_prompt_line(prefixes: TranscriptPrefixes = DEFAULT_PREFIXES) -> str:
    """Line that streamed assistant text is appended to."""
    return prefixes.assistant


def welcome_lines(
    send_key: str,
    prefixes: TranscriptPrefixes = DEFAULT_PREFIXES,
) -> list[str]:
    """Greeting written into a freshly opened transcript."""
    return [
        "Welcome to Claude Chat!",
        f"Type your message and press {send_key} to send.",
        "",
        user_prompt_line(prefixes),
    ]
