"""Data models for transport requests."""

from pydantic import BaseModel, ConfigDict, Field


class TransportRequest(BaseModel):
    """A fully built HTTP request, ready to be sent by any transport."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(default="POST", description="HTTP method")
    url: str = Field(description="Target URL")
    headers: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Ordered (name, value) header pairs"
    )
    body: bytes = Field(default=b"", description="Encoded request body")

    def header(self, name: str) -> str | None:
        """Get the first header value with the given name (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None
