"""Data models for the conversation transcript.

These models define the structured form of a conversation, independent of
how it is rendered for the user.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a message in the conversation."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single role-tagged message reconstructed from the transcript."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Author of the message")
    content: str = Field(description="Message text, continuation lines joined with newlines")

    def to_wire(self) -> dict[str, str]:
        """Return the Messages API representation."""
        return {"role": self.role.value, "content": self.content}


class TranscriptPrefixes(BaseModel):
    """Line prefixes that open a new message in the transcript."""

    model_config = ConfigDict(frozen=True)

    user: str = Field(default="You: ", min_length=1)
    assistant: str = Field(default="Claude: ", min_length=1)


DEFAULT_PREFIXES = TranscriptPrefixes()
