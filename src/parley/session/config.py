"""Session configuration.

Centralizes the API endpoint, model and header settings so that the
controller never hard-codes provider details.
"""

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ConfigurationError
from ..transcript import DEFAULT_PREFIXES, TranscriptPrefixes

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_API_VERSION = "2023-06-01"


class ChatConfig(BaseModel):
    """Configuration for a chat session."""

    model_config = ConfigDict(frozen=True)

    api_url: str = Field(default=DEFAULT_API_URL, description="Messages API endpoint")
    model: str = Field(default=DEFAULT_MODEL, description="Target model identifier")
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0, description="Output token bound")
    system: str | None = Field(default=None, description="Optional system prompt")

    api_key_env: str = Field(default="ANTHROPIC_API_KEY", description="Credential variable")
    fallback_api_key_env: str | None = Field(
        default="CLAUDE_API_KEY",
        description="Variable consulted when api_key_env is unset"
    )
    api_key_header: str = Field(default="x-api-key")
    api_version_header: str = Field(default="anthropic-version")
    api_version: str = Field(default=DEFAULT_API_VERSION)
    content_type: str = Field(default="application/json")

    prefixes: TranscriptPrefixes = Field(default=DEFAULT_PREFIXES)
    transport: Literal["httpx", "curl"] = Field(
        default="httpx",
        description="Transport type: httpx or curl"
    )
    timeout: float | None = Field(default=None, gt=0, description="Transport timeout in seconds")

    @field_validator("transport", mode="before")
    @classmethod
    def normalize_transport(cls, v: Any) -> Any:
        """Accept transport names in any case."""
        return v.strip().lower() if isinstance(v, str) else v

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any
    ) -> "ChatConfig":
        """Build a config from environment variables.

        Environment variables:
            PARLEY_MODEL: Model identifier
            PARLEY_API_URL: Messages API endpoint
            PARLEY_MAX_TOKENS: Output token bound
            PARLEY_TRANSPORT: Transport type (httpx or curl)
            PARLEY_SYSTEM_PROMPT: System prompt

        Keyword overrides whose value is not None take precedence.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        mapping = {
            "PARLEY_MODEL": "model",
            "PARLEY_API_URL": "api_url",
            "PARLEY_MAX_TOKENS": "max_tokens",
            "PARLEY_TRANSPORT": "transport",
            "PARLEY_SYSTEM_PROMPT": "system",
        }
        for var, field in mapping.items():
            if env.get(var):
                values[field] = env[var]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def resolve_api_key(config: ChatConfig, environ: Mapping[str, str] | None = None) -> str:
    """Read the API key from the environment.

    Raises:
        ConfigurationError: If neither the primary nor the fallback variable is set
    """
    env = os.environ if environ is None else environ

    api_key = env.get(config.api_key_env)
    if not api_key and config.fallback_api_key_env:
        api_key = env.get(config.fallback_api_key_env)

    if not api_key:
        raise ConfigurationError(f"No API key found in {config.api_key_env}")
    return api_key
