"""Events produced by the event-stream decoder."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ContentDelta(BaseModel):
    """An incremental fragment of assistant text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["content_delta"] = "content_delta"
    text: str = Field(description="Text to append to the reply")


class StreamEnd(BaseModel):
    """The transport finished successfully."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["stream_end"] = "stream_end"


class StreamError(BaseModel):
    """The transport failed; no further events follow."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["stream_error"] = "stream_error"
    cause: str = Field(description="Human-readable failure description")


StreamEvent = ContentDelta | StreamEnd | StreamError
